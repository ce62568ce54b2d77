from datetime import date
from decimal import Decimal

import pytest

from rentals import services
from rentals.exceptions import ConcurrentModificationError, InvalidTransitionError, ValidationError
from rentals.models import Car, Payment, Rental, Review
from rentals.statuses import Action, Actor, CarStatus, PaymentStatus, RentalStatus

from .conftest import TODAY

pytestmark = pytest.mark.django_db


# ==========================
# สร้างการจอง
# ==========================

def test_create_rental_snapshots_price(car, customer):
    rental = services.create_rental(customer, car, date(2024, 6, 1), date(2024, 6, 4), 'สนามบิน', today=TODAY)

    assert rental.booking_ref.startswith('BK-')
    assert rental.shop == car.shop
    assert rental.total_amount == Decimal('3300.00')
    assert rental.rental_status == RentalStatus.PENDING
    assert rental.payment_status == PaymentStatus.PENDING
    assert rental.version == 1


def test_cannot_book_own_car(car, shop_owner):
    with pytest.raises(ValidationError) as exc:
        services.create_rental(shop_owner, car, date(2024, 6, 1), date(2024, 6, 4), today=TODAY)
    assert exc.value.code == 'own_car'


def test_overlapping_booking_is_rejected(car, other_customer, make_rental):
    make_rental(start_date=date(2024, 6, 10), end_date=date(2024, 6, 13))

    with pytest.raises(ValidationError) as exc:
        services.create_rental(other_customer, car, date(2024, 6, 12), date(2024, 6, 15), today=TODAY)
    assert exc.value.code == 'overlap'
    assert Rental.objects.count() == 1


def test_back_to_back_booking_succeeds(car, other_customer, make_rental):
    make_rental(start_date=date(2024, 6, 10), end_date=date(2024, 6, 13))

    rental = services.create_rental(other_customer, car, date(2024, 6, 13), date(2024, 6, 15), today=TODAY)
    assert rental.pk is not None


def test_cancelled_booking_does_not_block(car, other_customer, make_rental):
    make_rental(RentalStatus.CANCELLED, start_date=date(2024, 6, 10), end_date=date(2024, 6, 13))

    services.create_rental(other_customer, car, date(2024, 6, 11), date(2024, 6, 12), today=TODAY)
    assert Rental.objects.count() == 2


def test_car_in_maintenance_cannot_be_booked(car, customer):
    Car.objects.filter(pk=car.pk).update(status=CarStatus.MAINTENANCE)

    with pytest.raises(ValidationError) as exc:
        services.create_rental(customer, car, date(2024, 6, 1), date(2024, 6, 4), today=TODAY)
    assert exc.value.code == 'car_unavailable'


# ==========================
# เปลี่ยนสถานะ
# ==========================

def test_approve_booking_bumps_version_and_rents_car(rental, car):
    rental = services.perform_action(rental.pk, Action.APPROVE_BOOKING, Actor.SHOP)

    assert rental.rental_status == RentalStatus.CONFIRMED
    assert rental.version == 2
    car.refresh_from_db()
    assert car.status == CarStatus.RENTED


def test_stale_snapshot_raises(rental):
    stale = Rental.objects.get(pk=rental.pk)
    services.perform_action(rental.pk, Action.UPLOAD_PAYMENT_PROOF, Actor.CUSTOMER)

    with pytest.raises(ConcurrentModificationError) as exc:
        services.transition_rental(stale, Action.APPROVE_BOOKING, Actor.SHOP)
    assert exc.value.expected_version == 1

    rental.refresh_from_db()
    assert rental.rental_status == RentalStatus.PENDING
    assert rental.payment_status == PaymentStatus.PENDING_VERIFICATION


def test_perform_action_retries_once(rental, monkeypatch):
    original = services.transition_rental
    calls = []

    def flaky(rental, *args, **kwargs):
        calls.append(rental.version)
        if len(calls) == 1:
            raise ConcurrentModificationError(rental.pk, rental.version)
        return original(rental, *args, **kwargs)

    monkeypatch.setattr(services, 'transition_rental', flaky)
    rental = services.perform_action(rental.pk, Action.APPROVE_BOOKING, Actor.SHOP)

    assert len(calls) == 2
    assert rental.rental_status == RentalStatus.CONFIRMED


def test_perform_action_gives_up_after_retry(rental, monkeypatch):
    def always_stale(rental, *args, **kwargs):
        raise ConcurrentModificationError(rental.pk, rental.version)

    monkeypatch.setattr(services, 'transition_rental', always_stale)
    with pytest.raises(ConcurrentModificationError):
        services.perform_action(rental.pk, Action.APPROVE_BOOKING, Actor.SHOP)


def test_invalid_transition_leaves_row_untouched(make_rental):
    rental = make_rental(RentalStatus.COMPLETED, PaymentStatus.PAID)

    with pytest.raises(InvalidTransitionError):
        services.perform_action(rental.pk, Action.CANCEL, Actor.CUSTOMER)

    rental.refresh_from_db()
    assert rental.rental_status == RentalStatus.COMPLETED
    assert rental.version == 1


def test_cancel_confirmed_booking_frees_car(make_rental, car):
    rental = make_rental(RentalStatus.CONFIRMED, PaymentStatus.PENDING)
    Car.objects.filter(pk=car.pk).update(status=CarStatus.RENTED)

    services.perform_action(rental.pk, Action.CANCEL, Actor.CUSTOMER)

    car.refresh_from_db()
    assert car.status == CarStatus.AVAILABLE


# ==========================
# ชำระเงิน / คืนเงิน
# ==========================

def test_upload_then_verify_payment(rental, slip):
    rental = services.upload_payment_proof(rental.pk, slip)
    assert rental.payment_status == PaymentStatus.PENDING_VERIFICATION

    payment = Payment.objects.get(rental=rental)
    assert payment.amount == rental.total_amount
    assert payment.status == PaymentStatus.PENDING_VERIFICATION

    rental = services.perform_action(rental.pk, Action.VERIFY_PAYMENT, Actor.SHOP)
    assert rental.payment_status == PaymentStatus.PAID
    payment.refresh_from_db()
    assert payment.status == PaymentStatus.PAID
    assert payment.verified_at is not None


def test_rejected_slip_can_be_replaced(rental, slip):
    services.upload_payment_proof(rental.pk, slip)
    services.perform_action(rental.pk, Action.REJECT_PAYMENT, Actor.SHOP)
    assert Payment.objects.get(rental=rental).status == PaymentStatus.FAILED

    slip.seek(0)
    rental = services.upload_payment_proof(rental.pk, slip)
    assert rental.payment_status == PaymentStatus.PENDING_VERIFICATION
    assert rental.payments.count() == 2


def test_upload_on_paid_booking_creates_no_payment(make_rental, slip):
    rental = make_rental(payment_status=PaymentStatus.PAID)

    with pytest.raises(InvalidTransitionError):
        services.upload_payment_proof(rental.pk, slip)
    assert not Payment.objects.exists()


def test_reject_paid_booking_then_refund(make_rental):
    rental = make_rental(payment_status=PaymentStatus.PAID)

    rental = services.perform_action(rental.pk, Action.REJECT_BOOKING, Actor.SHOP)
    assert rental.rental_status == RentalStatus.CANCELLED
    assert rental.payment_status == PaymentStatus.REFUND_PENDING

    services.save_refund_account(rental, 'กสิกรไทย', '1234567890', 'สมชาย ใจดี')
    assert rental.has_refund_account

    rental = services.settle_refund(rental.pk)
    assert rental.payment_status == PaymentStatus.REFUNDED
    assert rental.rental_status == RentalStatus.CANCELLED


def test_refund_account_only_while_refund_pending(rental):
    with pytest.raises(ValidationError):
        services.save_refund_account(rental, 'กสิกรไทย', '1234567890', 'สมชาย ใจดี')


def test_settle_refund_twice_fails(make_rental):
    rental = make_rental(RentalStatus.CANCELLED, PaymentStatus.REFUND_PENDING)
    services.settle_refund(rental.pk)

    with pytest.raises(InvalidTransitionError):
        services.settle_refund(rental.pk)


# ==========================
# คืนรถ / รีวิว / ปิดงาน
# ==========================

def test_return_flow_frees_car_and_allows_one_review(make_rental, car, customer):
    rental = make_rental(RentalStatus.ONGOING, PaymentStatus.PAID)
    Car.objects.filter(pk=car.pk).update(status=CarStatus.RENTED)

    rental = services.perform_action(rental.pk, Action.REQUEST_RETURN, Actor.CUSTOMER)
    assert rental.status_before_return == RentalStatus.ONGOING
    rental = services.perform_action(rental.pk, Action.APPROVE_RETURN, Actor.SHOP)
    assert rental.rental_status == RentalStatus.RETURN_APPROVED
    car.refresh_from_db()
    assert car.status == CarStatus.AVAILABLE

    review = services.submit_review(rental, customer, 5, 'รถสะอาด')
    assert review.car_id == car.pk
    assert Rental.objects.get(pk=rental.pk).has_review

    with pytest.raises(ValidationError):
        services.submit_review(rental, customer, 4)
    assert Review.objects.count() == 1


def test_reject_return_restores_previous_status(make_rental):
    rental = make_rental(RentalStatus.CONFIRMED, PaymentStatus.PAID)
    services.perform_action(rental.pk, Action.REQUEST_RETURN, Actor.CUSTOMER)

    rental = services.perform_action(rental.pk, Action.REJECT_RETURN, Actor.SHOP)
    assert rental.rental_status == RentalStatus.CONFIRMED
    assert rental.status_before_return == ''


def test_complete_returned_rentals(make_rental):
    done = make_rental(RentalStatus.RETURN_APPROVED, PaymentStatus.PAID, has_review=True)
    open_ = make_rental(
        RentalStatus.ONGOING, PaymentStatus.PAID,
        start_date=date(2024, 7, 1), end_date=date(2024, 7, 3),
    )

    completed, failed = services.complete_returned_rentals()

    assert completed == [done.pk]
    assert failed == []
    done.refresh_from_db()
    open_.refresh_from_db()
    assert done.rental_status == RentalStatus.COMPLETED
    assert open_.rental_status == RentalStatus.ONGOING


# ==========================
# สถานะรถกับการจองหลายรายการ
# ==========================

def test_rented_car_can_still_be_booked_for_other_dates(rental, car, other_customer):
    services.perform_action(rental.pk, Action.APPROVE_BOOKING, Actor.SHOP)
    car.refresh_from_db()
    assert car.status == CarStatus.RENTED

    later = services.create_rental(other_customer, car, date(2024, 7, 1), date(2024, 7, 4), today=TODAY)
    assert later.rental_status == RentalStatus.PENDING

    with pytest.raises(ValidationError) as exc:
        services.create_rental(other_customer, car, date(2024, 6, 11), date(2024, 6, 12), today=TODAY)
    assert exc.value.code == 'overlap'


def test_cancelling_one_booking_keeps_car_rented_for_another(make_rental, car):
    first = make_rental()
    second = make_rental(start_date=date(2024, 7, 1), end_date=date(2024, 7, 4))
    services.perform_action(first.pk, Action.APPROVE_BOOKING, Actor.SHOP)
    services.perform_action(second.pk, Action.APPROVE_BOOKING, Actor.SHOP)

    services.perform_action(first.pk, Action.CANCEL, Actor.CUSTOMER)

    second.refresh_from_db()
    car.refresh_from_db()
    assert second.rental_status == RentalStatus.CONFIRMED
    assert car.status == CarStatus.RENTED


def test_approved_return_keeps_car_rented_for_next_booking(make_rental, car):
    first = make_rental(RentalStatus.RETURN_REQUESTED, PaymentStatus.PAID, status_before_return=RentalStatus.ONGOING)
    make_rental(RentalStatus.CONFIRMED, PaymentStatus.PAID, start_date=date(2024, 7, 1), end_date=date(2024, 7, 4))
    Car.objects.filter(pk=car.pk).update(status=CarStatus.RENTED)

    services.perform_action(first.pk, Action.APPROVE_RETURN, Actor.SHOP)

    car.refresh_from_db()
    assert car.status == CarStatus.RENTED


def test_maintenance_is_never_overwritten(make_rental, car):
    confirmed = make_rental(RentalStatus.CONFIRMED, PaymentStatus.PENDING)
    pending = make_rental(start_date=date(2024, 7, 1), end_date=date(2024, 7, 4))
    Car.objects.filter(pk=car.pk).update(status=CarStatus.MAINTENANCE)

    services.perform_action(confirmed.pk, Action.CANCEL, Actor.CUSTOMER)
    car.refresh_from_db()
    assert car.status == CarStatus.MAINTENANCE

    services.perform_action(pending.pk, Action.APPROVE_BOOKING, Actor.SHOP)
    car.refresh_from_db()
    assert car.status == CarStatus.MAINTENANCE


def test_review_race_reports_already_reviewed(make_rental, customer):
    rental = make_rental(RentalStatus.RETURN_APPROVED, PaymentStatus.PAID)
    stale = Rental.objects.get(pk=rental.pk)
    services.submit_review(rental, customer, 5)

    with pytest.raises(ValidationError) as exc:
        services.submit_review(stale, customer, 3)
    assert exc.value.code == 'cannot_review'
    assert Review.objects.count() == 1
