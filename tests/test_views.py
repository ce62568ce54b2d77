from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.urls import reverse
from django.utils import timezone

from rentals.models import Rental, Shop
from rentals.statuses import CarStatus, PaymentStatus, RentalStatus

pytestmark = pytest.mark.django_db


@pytest.fixture
def customer_client(client, customer):
    client.force_login(customer)
    return client


@pytest.fixture
def shop_client(client, shop):
    client.force_login(shop.owner)
    return client


# ==========================
# ลูกค้า
# ==========================

def test_car_list_shows_available_cars(client, car):
    response = client.get(reverse('car_list'))
    assert response.status_code == 200
    assert 'Yaris' in response.content.decode()


def test_car_list_search_filters(client, car):
    response = client.get(reverse('car_list'), {'q': 'Civic'})
    assert list(response.context['cars']) == []


def test_car_detail_live_quote(client, car):
    start = timezone.localdate() + timedelta(days=1)
    response = client.get(reverse('car_detail', args=[car.id]), {
        'start_date': start.isoformat(),
        'end_date': (start + timedelta(days=3)).isoformat(),
    })
    assert response.status_code == 200
    assert response.context['quote'].total == 3300


def test_anonymous_booking_redirects_to_login(client, car):
    response = client.post(reverse('car_detail', args=[car.id]), {})
    assert response.status_code == 302
    assert response.url == reverse('login')


def test_customer_books_a_car(customer_client, car, customer):
    start = timezone.localdate() + timedelta(days=2)
    response = customer_client.post(reverse('car_detail', args=[car.id]), {
        'start_date': start.isoformat(),
        'end_date': (start + timedelta(days=2)).isoformat(),
        'pickup_location': 'สนามบินดอนเมือง',
    })

    rental = Rental.objects.get(customer=customer)
    assert response.status_code == 302
    assert response.url == reverse('booking_detail', args=[rental.id])
    assert rental.total_amount == Decimal('2200.00')


def test_booking_with_bad_dates_shows_form_error(customer_client, car):
    start = timezone.localdate() + timedelta(days=2)
    response = customer_client.post(reverse('car_detail', args=[car.id]), {
        'start_date': start.isoformat(),
        'end_date': start.isoformat(),
    })
    assert response.status_code == 200
    assert response.context['form'].errors
    assert not Rental.objects.exists()


def test_booking_history_tabs(customer_client, make_rental):
    make_rental()
    make_rental(RentalStatus.CANCELLED)

    response = customer_client.get(reverse('booking_history'), {'tab': 'pending'})
    assert response.status_code == 200
    assert len(response.context['rentals']) == 1
    assert response.context['tab_counts']['all'] == 2


def test_customer_cancels_booking(customer_client, rental):
    response = customer_client.post(reverse('cancel_booking', args=[rental.id]))
    assert response.status_code == 302
    rental.refresh_from_db()
    assert rental.rental_status == RentalStatus.CANCELLED


def test_cancel_paid_booking_shows_error(customer_client, make_rental):
    rental = make_rental(payment_status=PaymentStatus.PAID)
    response = customer_client.post(reverse('cancel_booking', args=[rental.id]), follow=True)

    rental.refresh_from_db()
    assert rental.rental_status == RentalStatus.PENDING
    assert 'ไม่สามารถทำรายการนี้ได้' in response.content.decode()


def test_other_customer_cannot_see_booking(client, other_customer, rental):
    client.force_login(other_customer)
    assert client.get(reverse('booking_detail', args=[rental.id])).status_code == 404
    assert client.post(reverse('cancel_booking', args=[rental.id])).status_code == 404


def test_payment_page_has_qr_payload(customer_client, rental):
    response = customer_client.get(reverse('payment_page', args=[rental.id]))
    assert response.status_code == 200
    assert response.context['qr_payload'].startswith('000201010212')
    assert response.context['can_pay']


def test_payment_page_survives_bad_promptpay_id(customer_client, rental, shop):
    Shop.objects.filter(pk=shop.pk).update(promptpay_id='123')
    response = customer_client.get(reverse('payment_page', args=[rental.id]))
    assert response.status_code == 200
    assert response.context['qr_payload'] is None


def test_upload_slip(customer_client, rental, slip):
    response = customer_client.post(reverse('upload_payment_proof', args=[rental.id]), {'payment_proof': slip})
    assert response.status_code == 302
    assert response.url == reverse('booking_detail', args=[rental.id])
    rental.refresh_from_db()
    assert rental.payment_status == PaymentStatus.PENDING_VERIFICATION


def test_submit_review_after_return(customer_client, make_rental):
    rental = make_rental(RentalStatus.RETURN_APPROVED, PaymentStatus.PAID)
    customer_client.post(reverse('submit_review', args=[rental.id]), {'stars': 4, 'comment': 'ดีมาก'})
    rental.refresh_from_db()
    assert rental.has_review
    assert rental.review.stars == 4


def test_refund_account_form(customer_client, make_rental):
    rental = make_rental(RentalStatus.CANCELLED, PaymentStatus.REFUND_PENDING)
    customer_client.post(reverse('refund_account', args=[rental.id]), {
        'refund_bank_name': 'กสิกรไทย',
        'refund_account_no': '1234567890',
        'refund_account_name': 'สมชาย ใจดี',
    })
    rental.refresh_from_db()
    assert rental.has_refund_account


# ==========================
# ร้าน
# ==========================

def test_inbox_requires_shop(customer_client):
    response = customer_client.get(reverse('shop_inbox'))
    assert response.status_code == 302
    assert response.url == reverse('car_list')


def test_inbox_lists_buttons(shop_client, make_rental):
    make_rental(payment_status=PaymentStatus.PENDING_VERIFICATION)
    response = shop_client.get(reverse('shop_inbox'))

    assert response.status_code == 200
    rental = response.context['rentals'][0]
    assert [slug for slug, _ in rental.shop_buttons] == ['approve', 'reject', 'verify-payment', 'reject-payment']
    assert response.context['counts']['pending'] == 1


def test_shop_approves_booking(shop_client, rental, car):
    response = shop_client.post(reverse('shop_rental_action', args=[rental.id, 'approve']))
    assert response.status_code == 302
    rental.refresh_from_db()
    car.refresh_from_db()
    assert rental.rental_status == RentalStatus.CONFIRMED
    assert car.status == CarStatus.RENTED


def test_unknown_shop_action_is_404(shop_client, rental):
    response = shop_client.post(reverse('shop_rental_action', args=[rental.id, 'teleport']))
    assert response.status_code == 404


def test_other_shop_cannot_touch_rental(client, rental):
    owner = User.objects.create_user(username='0833333333', password='x-pass-12345')
    Shop.objects.create(owner=owner, name='ร้านอื่น')
    client.force_login(owner)
    response = client.post(reverse('shop_rental_action', args=[rental.id, 'approve']))
    assert response.status_code == 404


def test_settle_refund_needs_account(shop_client, make_rental):
    rental = make_rental(RentalStatus.CANCELLED, PaymentStatus.REFUND_PENDING)
    shop_client.post(reverse('shop_settle_refund', args=[rental.id]))
    rental.refresh_from_db()
    assert rental.payment_status == PaymentStatus.REFUND_PENDING

    Rental.objects.filter(pk=rental.pk).update(
        refund_bank_name='กสิกรไทย', refund_account_no='1234567890', refund_account_name='สมชาย ใจดี',
    )
    shop_client.post(reverse('shop_settle_refund', args=[rental.id]))
    rental.refresh_from_db()
    assert rental.payment_status == PaymentStatus.REFUNDED


def test_refund_dashboard(shop_client, make_rental):
    make_rental(RentalStatus.CANCELLED, PaymentStatus.REFUND_PENDING)
    response = shop_client.get(reverse('shop_refunds'))
    assert response.status_code == 200
    assert len(response.context['refunds']) == 1


# ==========================
# สมัครสมาชิก / เข้าสู่ระบบ
# ==========================

def test_register_shop_owner(client):
    response = client.post(reverse('register'), {
        'first_name': 'สมศรี',
        'last_name': 'ใจดี',
        'email': 'somsri@example.com',
        'username': '0844444444',
        'password1': 'Rent-a-car-2024!',
        'password2': 'Rent-a-car-2024!',
        'is_shop': 'on',
        'shop_name': 'สมศรีคาร์เร้นท์',
        'promptpay_id': '0844444444',
    })
    assert response.status_code == 302
    shop = Shop.objects.get(owner__username='0844444444')
    assert shop.name == 'สมศรีคาร์เร้นท์'


def test_register_shop_requires_name(client):
    response = client.post(reverse('register'), {
        'first_name': 'สมศรี',
        'last_name': 'ใจดี',
        'email': 'somsri@example.com',
        'username': '0844444444',
        'password1': 'Rent-a-car-2024!',
        'password2': 'Rent-a-car-2024!',
        'is_shop': 'on',
    })
    assert response.status_code == 200
    assert 'shop_name' in response.context['form'].errors


def test_login_redirect(client, customer, shop):
    client.force_login(customer)
    assert client.get(reverse('login_redirect')).url == reverse('booking_history')
    client.force_login(shop.owner)
    assert client.get(reverse('login_redirect')).url == reverse('shop_inbox')


# ==========================
# จัดการรถ / ข้อมูลร้าน
# ==========================

def test_shop_adds_car(shop_client, shop):
    response = shop_client.post(reverse('shop_add_car'), {
        'brand': 'Honda',
        'model': 'City',
        'year': 2022,
        'license_plate': 'ขค 5678',
        'car_type': 'SEDAN',
        'description': '',
        'daily_rate': '1200.00',
        'insurance_rate': '150.00',
    })
    assert response.status_code == 302
    car = shop.cars.get(model='City')
    assert car.status == CarStatus.AVAILABLE
    assert car.daily_rate == Decimal('1200.00')


def test_add_car_rejects_zero_rate(shop_client, shop):
    response = shop_client.post(reverse('shop_add_car'), {
        'brand': 'Honda',
        'model': 'City',
        'car_type': 'SEDAN',
        'daily_rate': '0',
        'insurance_rate': '0',
    })
    assert response.status_code == 200
    assert 'daily_rate' in response.context['form'].errors
    assert not shop.cars.filter(model='City').exists()


def test_add_car_requires_shop(customer_client):
    response = customer_client.get(reverse('shop_add_car'))
    assert response.status_code == 302
    assert response.url == reverse('car_list')


def test_shop_updates_promptpay_id(shop_client, shop):
    response = shop_client.post(reverse('shop_profile'), {
        'name': 'ร้านรถดีมาก',
        'phone': '021234567',
        'promptpay_id': '0898765432',
    })
    assert response.status_code == 302
    shop.refresh_from_db()
    assert shop.name == 'ร้านรถดีมาก'
    assert shop.promptpay_id == '0898765432'


def test_shop_profile_rejects_bad_promptpay_id(shop_client, shop):
    response = shop_client.post(reverse('shop_profile'), {
        'name': shop.name,
        'phone': '',
        'promptpay_id': '12345',
    })
    assert response.status_code == 200
    assert 'promptpay_id' in response.context['form'].errors
    shop.refresh_from_db()
    assert shop.promptpay_id == '0812345678'


def test_rented_car_is_still_listed_and_bookable(client, car):
    car.status = CarStatus.RENTED
    car.save()

    assert car in list(client.get(reverse('car_list')).context['cars'])
    response = client.get(reverse('car_detail', args=[car.id]))
    assert 'จองรถ' in response.content.decode()


def test_car_in_maintenance_is_hidden(client, car):
    car.status = CarStatus.MAINTENANCE
    car.save()

    assert list(client.get(reverse('car_list')).context['cars']) == []
