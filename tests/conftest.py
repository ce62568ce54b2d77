from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.core.files.uploadedfile import SimpleUploadedFile

from rentals.models import Car, Rental, Shop
from rentals.statuses import PaymentStatus, RentalStatus

# GIF 1x1 พิกเซล ใช้แทนสลิปโอนเงิน
TINY_GIF = (
    b'GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00'
    b',\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;'
)

TODAY = date(2024, 6, 1)


class FakeRental:
    """Plain object with the attributes the pure rule modules read."""

    def __init__(self, rental_status=RentalStatus.PENDING, payment_status=PaymentStatus.PENDING,
                 created_at=None, has_review=False, status_before_return=None):
        self.rental_status = rental_status
        self.payment_status = payment_status
        self.created_at = created_at or datetime(2024, 6, 1, 9, 0, tzinfo=dt_timezone.utc)
        self.has_review = has_review
        self.status_before_return = status_before_return


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.RENTAL_FREE_CANCEL_HOURS = 2
    settings.PROMPTPAY_DEFAULT_ID = ''


@pytest.fixture
def slip():
    return SimpleUploadedFile('slip.gif', TINY_GIF, content_type='image/gif')


@pytest.fixture
def customer(db):
    return User.objects.create_user(username='0811111111', password='secret-pass-1', first_name='สมชาย')


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(username='0822222222', password='secret-pass-2')


@pytest.fixture
def shop_owner(db):
    return User.objects.create_user(username='0899999999', password='secret-pass-3')


@pytest.fixture
def shop(shop_owner):
    return Shop.objects.create(owner=shop_owner, name='ร้านรถดี', promptpay_id='0812345678')


@pytest.fixture
def car(shop):
    return Car.objects.create(
        shop=shop,
        brand='Toyota',
        model='Yaris',
        license_plate='กข 1234',
        daily_rate=Decimal('1000.00'),
        insurance_rate=Decimal('100.00'),
    )


@pytest.fixture
def make_rental(car, customer):
    def _make(rental_status=RentalStatus.PENDING, payment_status=PaymentStatus.PENDING, **kwargs):
        fields = {
            'car': car,
            'shop': car.shop,
            'customer': customer,
            'start_date': date(2024, 6, 10),
            'end_date': date(2024, 6, 13),
            'daily_rate': car.daily_rate,
            'insurance_rate': car.insurance_rate,
            'total_amount': Decimal('3300.00'),
            'rental_status': rental_status,
            'payment_status': payment_status,
        }
        fields.update(kwargs)
        return Rental.objects.create(**fields)

    return _make


@pytest.fixture
def rental(make_rental):
    return make_rental()
