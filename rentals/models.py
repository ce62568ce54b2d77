# rentals/models.py

import random
import string

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .exceptions import ValidationError
from .presentation import CAR_STATUS_DISPLAY, PAYMENT_STATUS_DISPLAY, RENTAL_STATUS_DISPLAY, choices
from .statuses import CarStatus, PaymentStatus, RentalStatus


def generate_booking_ref():
    # เลขที่ใบจอง เช่น BK-7Q2M9XKD
    return 'BK-' + ''.join(random.choices(string.ascii_uppercase + string.digits, k=8))


# ตาราง Shop (ร้านเช่ารถ 1 user = 1 ร้าน)
class Shop(models.Model):
    owner = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='shop')
    name = models.CharField(max_length=150, verbose_name="ชื่อร้าน")
    phone = models.CharField(max_length=20, blank=True, default='')
    # เบอร์โทรหรือเลขบัตรประชาชนที่ผูกพร้อมเพย์ไว้ (ใช้สร้าง QR)
    promptpay_id = models.CharField(max_length=20, blank=True, default='', verbose_name="พร้อมเพย์")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


# ตาราง Car
class Car(models.Model):
    CAR_TYPE_CHOICES = [
        ('SEDAN', 'รถเก๋ง'),
        ('SUV', 'รถอเนกประสงค์'),
        ('TRUCK', 'รถกระบะ'),
        ('VAN', 'รถตู้'),
        ('EV', 'รถไฟฟ้า'),
    ]

    STATUS_CHOICES = choices(CAR_STATUS_DISPLAY)

    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, related_name='cars')
    brand = models.CharField(max_length=50, verbose_name="ยี่ห้อ")
    model = models.CharField(max_length=50, verbose_name="รุ่น")
    year = models.PositiveIntegerField(null=True, blank=True, verbose_name="ปีจดทะเบียน")
    license_plate = models.CharField(max_length=100, blank=True, default='')
    car_type = models.CharField(max_length=10, choices=CAR_TYPE_CHOICES, default='SEDAN')
    description = models.TextField(blank=True, default='')

    daily_rate = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    # ค่าประกันต่อวัน (0 = ไม่มีประกัน)
    insurance_rate = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=CarStatus.AVAILABLE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.brand} {self.model} ({self.license_plate})'

    @property
    def is_bookable(self):
        # รถที่ถูกเช่าอยู่ยังจองช่วงวันอื่นได้ ยกเว้นซ่อมบำรุง
        return self.status != CarStatus.MAINTENANCE


# ตาราง Rental (การจอง)
class Rental(models.Model):
    RENTAL_STATUS_CHOICES = choices(RENTAL_STATUS_DISPLAY)
    PAYMENT_STATUS_CHOICES = choices(PAYMENT_STATUS_DISPLAY)

    booking_ref = models.CharField(max_length=20, unique=True, default=generate_booking_ref, editable=False)
    car = models.ForeignKey(Car, on_delete=models.PROTECT, related_name='rentals')
    shop = models.ForeignKey(Shop, on_delete=models.PROTECT, related_name='rentals')
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='rentals')

    start_date = models.DateField()
    end_date = models.DateField()
    pickup_location = models.CharField(max_length=255, blank=True, default='')
    return_location = models.CharField(max_length=255, blank=True, default='')

    # ราคา ณ วันที่จอง (ไม่คำนวณใหม่ภายหลัง)
    daily_rate = models.DecimalField(max_digits=10, decimal_places=2)
    insurance_rate = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])

    rental_status = models.CharField(max_length=20, choices=RENTAL_STATUS_CHOICES, default=RentalStatus.PENDING)
    payment_status = models.CharField(max_length=30, choices=PAYMENT_STATUS_CHOICES, default=PaymentStatus.PENDING)
    # สถานะก่อนขอคืนรถ (confirmed/ongoing) เอาไว้ย้อนกลับตอนร้านปฏิเสธการคืน
    status_before_return = models.CharField(max_length=20, blank=True, default='')
    has_review = models.BooleanField(default=False)

    # optimistic lock: เพิ่มทีละ 1 ทุกครั้งที่เปลี่ยนสถานะ
    version = models.PositiveIntegerField(default=1)

    # บัญชีรับเงินคืน (ลูกค้ากรอกเองตอนรอคืนเงิน)
    refund_bank_name = models.CharField(max_length=100, blank=True, default='')
    refund_account_no = models.CharField(max_length=30, blank=True, default='')
    refund_account_name = models.CharField(max_length=150, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F('start_date')),
                name='rental_end_after_start',
            ),
        ]

    def __str__(self):
        return f"Rental {self.booking_ref} - {self.car}"

    def clean(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValidationError('วันที่สิ้นสุดต้องเป็นวันหลังจากวันที่เริ่มต้น', code='invalid_range')

    @property
    def days(self):
        return (self.end_date - self.start_date).days

    @property
    def has_refund_account(self):
        return bool(self.refund_bank_name and self.refund_account_no and self.refund_account_name)


# ตาราง Payment (หลักฐานการโอน 1 การจองส่งได้หลายครั้งถ้าโดนปฏิเสธ)
class Payment(models.Model):
    STATUS_CHOICES = [
        (PaymentStatus.PENDING_VERIFICATION, PAYMENT_STATUS_DISPLAY[PaymentStatus.PENDING_VERIFICATION].label),
        (PaymentStatus.PAID, PAYMENT_STATUS_DISPLAY[PaymentStatus.PAID].label),
        (PaymentStatus.FAILED, PAYMENT_STATUS_DISPLAY[PaymentStatus.FAILED].label),
        (PaymentStatus.REJECTED, PAYMENT_STATUS_DISPLAY[PaymentStatus.REJECTED].label),
    ]

    rental = models.ForeignKey(Rental, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=30, default='promptpay')
    proof_image = models.ImageField(upload_to='payment_proofs/')
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=PaymentStatus.PENDING_VERIFICATION)
    created_at = models.DateTimeField(auto_now_add=True)
    verified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f'Payment for Rental #{self.rental_id}'


class Review(models.Model):
    rental = models.OneToOneField(Rental, on_delete=models.CASCADE, related_name='review')
    car = models.ForeignKey(Car, related_name="reviews", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    stars = models.IntegerField(default=5, validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Review {self.stars}★ for {self.car}"
