# rentals/services.py
"""
ชั้นที่เชื่อม state machine (pure) เข้ากับฐานข้อมูล

ลำดับทุกครั้ง: อ่านแถวล่าสุด -> ตรวจกับ lifecycle -> UPDATE แบบมีเงื่อนไข
(id + version + สถานะเดิม) ถ้า UPDATE ไม่โดนแถวไหนเลย แปลว่ามีคนแก้ไปก่อน
-> ConcurrentModificationError
"""
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from . import eligibility, lifecycle, pricing
from .exceptions import ConcurrentModificationError, InvalidTransitionError, ValidationError
from .models import Car, Payment, Rental, Review
from .statuses import (
    ACTIVE_RENTAL_STATUSES,
    CAR_HOLDING_RENTAL_STATUSES,
    Action,
    Actor,
    CarStatus,
    PaymentStatus,
    RentalStatus,
)

logger = logging.getLogger(__name__)


# ==========================
# 1. สร้างการจอง
# ==========================

def create_rental(customer, car, start_date, end_date, pickup_location='', return_location='', today=None):
    if car.shop.owner_id == customer.pk:
        raise ValidationError('คุณไม่สามารถจองรถของตัวเองได้', code='own_car')

    q = pricing.quote(start_date, end_date, car.daily_rate, car.insurance_rate, today=today)

    with transaction.atomic():
        # ล็อกแถวรถไว้ กันสองคนจองช่วงเดียวกันพร้อมกัน
        car = Car.objects.select_for_update().select_related('shop').get(pk=car.pk)
        if not car.is_bookable:
            raise ValidationError('รถคันนี้ไม่พร้อมให้เช่าในขณะนี้', code='car_unavailable')

        overlapping = Rental.objects.filter(
            car=car,
            rental_status__in=ACTIVE_RENTAL_STATUSES,
            start_date__lt=end_date,
            end_date__gt=start_date,
        )
        if overlapping.exists():
            raise ValidationError('ช่วงวันที่เลือกมีการจองอยู่แล้ว กรุณาเลือกวันอื่น', code='overlap')

        rental = Rental.objects.create(
            car=car,
            shop=car.shop,
            customer=customer,
            start_date=start_date,
            end_date=end_date,
            pickup_location=pickup_location or '',
            return_location=return_location or '',
            daily_rate=q.daily_rate,
            insurance_rate=q.insurance_rate,
            total_amount=q.total,
        )

    logger.info(
        "rental %s created: car=%s customer=%s days=%s total=%s",
        rental.booking_ref, car.pk, customer.pk, q.days, q.total,
    )
    return rental


# ==========================
# 2. เปลี่ยนสถานะ
# ==========================

def _write(rental, transition, extra_fields=None):
    new = transition.state
    updates = {
        'rental_status': new.rental_status,
        'payment_status': new.payment_status,
        'status_before_return': new.status_before_return or '',
        'version': F('version') + 1,
        'updated_at': timezone.now(),
    }
    if extra_fields:
        updates.update(extra_fields)

    updated = Rental.objects.filter(
        pk=rental.pk,
        version=rental.version,
        rental_status=transition.previous.rental_status,
        payment_status=transition.previous.payment_status,
    ).update(**updates)
    if updated != 1:
        raise ConcurrentModificationError(rental.pk, rental.version)

    if transition.car_status:
        _sync_car_status(rental, transition.car_status)


def _sync_car_status(rental, car_status):
    # รถที่ร้านตั้งซ่อมบำรุงไว้ ไม่เปลี่ยนตามการจอง
    car = Car.objects.filter(pk=rental.car_id).exclude(status=CarStatus.MAINTENANCE)
    if car_status == CarStatus.AVAILABLE:
        still_out = Rental.objects.filter(
            car_id=rental.car_id,
            rental_status__in=CAR_HOLDING_RENTAL_STATUSES,
        ).exclude(pk=rental.pk)
        if still_out.exists():
            return
    car.update(status=car_status)


def _sync_payment_records(rental, transition, now):
    # อัปเดตสลิปล่าสุดให้ตรงกับผลการตรวจ
    pending = rental.payments.filter(status=PaymentStatus.PENDING_VERIFICATION)
    new_payment_status = transition.state.payment_status

    if transition.action == Action.VERIFY_PAYMENT:
        pending.update(status=PaymentStatus.PAID, verified_at=now)
    elif transition.action == Action.REJECT_PAYMENT:
        pending.update(status=PaymentStatus.FAILED, verified_at=now)
    elif transition.action == Action.REJECT_BOOKING and new_payment_status == PaymentStatus.REJECTED:
        pending.update(status=PaymentStatus.REJECTED, verified_at=now)


def transition_rental(rental, action, actor, extra_fields=None, now=None):
    """Validate ``action`` against the given snapshot and persist it.

    Raises ``ConcurrentModificationError`` when the row no longer matches
    the snapshot.
    """
    now = now or timezone.now()
    state = lifecycle.RentalState.from_rental(rental)
    try:
        transition = lifecycle.apply_transition(state, action, actor)
    except InvalidTransitionError as e:
        logger.warning("rental %s: %s", rental.pk, e)
        raise

    with transaction.atomic():
        _write(rental, transition, extra_fields)
        _sync_payment_records(rental, transition, now)

    rental.refresh_from_db()
    logger.info(
        "rental %s: %s by %s (%s/%s -> %s/%s)",
        rental.pk, action, actor,
        state.rental_status, state.payment_status,
        rental.rental_status, rental.payment_status,
    )
    return rental


def perform_action(rental_id, action, actor, extra_fields=None, now=None, retries=1):
    """Re-read the rental and apply ``action``; retry once on a lost race."""
    attempt = 0
    while True:
        rental = Rental.objects.get(pk=rental_id)
        try:
            return transition_rental(rental, action, actor, extra_fields, now=now)
        except ConcurrentModificationError as e:
            if attempt >= retries:
                logger.warning("rental %s: giving up after %s retries: %s", rental_id, attempt, e)
                raise
            attempt += 1
            logger.info("rental %s: stale snapshot, retrying (%s)", rental_id, attempt)


def upload_payment_proof(rental_id, image, now=None):
    """Attach a transfer slip and move the payment to ``pending_verification``."""
    with transaction.atomic():
        rental = Rental.objects.get(pk=rental_id)
        state = lifecycle.RentalState.from_rental(rental)
        # ตรวจก่อนสร้างแถว Payment เพื่อไม่ให้มีสลิปค้างถ้าสถานะไม่ถูก
        lifecycle.apply_transition(state, Action.UPLOAD_PAYMENT_PROOF, Actor.CUSTOMER)
        Payment.objects.create(
            rental=rental,
            amount=rental.total_amount,
            proof_image=image,
        )
        return transition_rental(rental, Action.UPLOAD_PAYMENT_PROOF, Actor.CUSTOMER, now=now)


def settle_refund(rental_id):
    rental = Rental.objects.get(pk=rental_id)
    state = lifecycle.RentalState.from_rental(rental)
    transition = lifecycle.settle_refund(state, Actor.SHOP)
    with transaction.atomic():
        _write(rental, transition)
    rental.refresh_from_db()
    logger.info("rental %s: refund settled (%s)", rental.pk, rental.total_amount)
    return rental


def save_refund_account(rental, bank_name, account_no, account_name):
    if rental.payment_status != PaymentStatus.REFUND_PENDING:
        raise ValidationError('รายการนี้ไม่ได้อยู่ในสถานะรอคืนเงิน', code='no_refund')
    rental.refund_bank_name = bank_name
    rental.refund_account_no = account_no
    rental.refund_account_name = account_name
    rental.save(update_fields=['refund_bank_name', 'refund_account_no', 'refund_account_name', 'updated_at'])
    return rental


# ==========================
# 3. รีวิว
# ==========================

def submit_review(rental, user, stars, comment=''):
    if not eligibility.can_review(rental):
        raise ValidationError('ต้องได้รับอนุมัติคืนรถก่อนจึงจะรีวิวได้ หรือคุณรีวิวไปแล้ว', code='cannot_review')

    with transaction.atomic():
        updated = Rental.objects.filter(
            pk=rental.pk,
            rental_status=RentalStatus.RETURN_APPROVED,
            has_review=False,
        ).update(has_review=True)
        if updated != 1:
            raise ValidationError('คุณรีวิวการเช่านี้ไปแล้ว', code='cannot_review')
        review = Review.objects.create(
            rental=rental,
            car_id=rental.car_id,
            user=user,
            stars=stars,
            comment=comment,
        )
    rental.has_review = True
    return review


# ==========================
# 4. งานของระบบ
# ==========================

def complete_returned_rentals(now=None):
    """Complete every rental whose return has been approved.

    Returns ``(completed, failed)`` lists of rental ids.
    """
    completed, failed = [], []
    ids = Rental.objects.filter(rental_status=RentalStatus.RETURN_APPROVED).values_list('pk', flat=True)
    for rental_id in list(ids):
        try:
            perform_action(rental_id, Action.COMPLETE, Actor.SYSTEM, now=now)
        except (InvalidTransitionError, ConcurrentModificationError) as e:
            logger.warning("rental %s not completed: %s", rental_id, e)
            failed.append(rental_id)
        else:
            completed.append(rental_id)
    return completed, failed
