# config/urls.py
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from booking import views as booking_views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', booking_views.car_list, name='car_list'),
    path('cars/', booking_views.car_list),
    path('cars/<int:car_id>/', booking_views.car_detail, name='car_detail'),
    path('booking/', include('booking.urls')),
    path('payments/', include('payments.urls')),
    path('shop/', include('shop.urls')),
    path('users/', include('users.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
