from django.urls import path

from . import views

urlpatterns = [
    # Flow การจอง (ผู้เช่า)
    path('my/', views.booking_history, name='booking_history'),
    path('<int:rental_id>/', views.booking_detail, name='booking_detail'),
    path('<int:rental_id>/cancel/', views.cancel_booking, name='cancel_booking'),
    path('<int:rental_id>/return/', views.request_return, name='request_return'),
    path('<int:rental_id>/review/', views.submit_review, name='submit_review'),
    path('<int:rental_id>/refund-account/', views.refund_account, name='refund_account'),
]
