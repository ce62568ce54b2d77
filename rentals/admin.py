# rentals/admin.py
from django.contrib import admin

from .models import Car, Payment, Rental, Review, Shop

admin.site.register(Shop)
admin.site.register(Review)


@admin.register(Car)
class CarAdmin(admin.ModelAdmin):
    list_display = ('brand', 'model', 'license_plate', 'shop', 'daily_rate', 'insurance_rate', 'status')
    list_filter = ('status', 'car_type')
    search_fields = ('brand', 'model', 'license_plate')


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ('amount', 'proof_image', 'status', 'created_at', 'verified_at')


@admin.register(Rental)
class RentalAdmin(admin.ModelAdmin):
    list_display = ('booking_ref', 'car', 'customer', 'start_date', 'end_date', 'rental_status', 'payment_status', 'total_amount')
    list_filter = ('rental_status', 'payment_status')
    search_fields = ('booking_ref', 'customer__username')
    # สถานะต้องเปลี่ยนผ่าน services เท่านั้น ห้ามแก้ตรงจากหน้า admin
    readonly_fields = ('booking_ref', 'rental_status', 'payment_status', 'status_before_return', 'total_amount', 'version', 'created_at')
    inlines = [PaymentInline]
