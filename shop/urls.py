from django.urls import path

from . import views

urlpatterns = [
    path('', views.inbox, name='shop_inbox'),
    path('rentals/<int:rental_id>/<str:action>/', views.rental_action, name='shop_rental_action'),
    path('refunds/', views.refund_dashboard, name='shop_refunds'),
    path('refunds/<int:rental_id>/settle/', views.settle_refund, name='shop_settle_refund'),
    path('cars/add/', views.add_car, name='shop_add_car'),
    path('profile/', views.shop_profile, name='shop_profile'),
]
