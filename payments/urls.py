from django.urls import path

from . import views

urlpatterns = [
    path('<int:rental_id>/', views.payment_page, name='payment_page'),
    path('<int:rental_id>/proof/', views.upload_proof, name='upload_payment_proof'),
]
