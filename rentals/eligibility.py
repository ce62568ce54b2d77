# rentals/eligibility.py
"""
สิทธิ์ที่ผู้ใช้ทำได้กับการจองหนึ่งรายการ ณ เวลาปัจจุบัน

ทุกฟังก์ชันเป็น pure function: รับ rental (อะไรก็ได้ที่มี attribute
rental_status / payment_status / created_at / has_review) และเวลา now
ที่ผู้เรียกส่งเข้ามาเอง ไม่อ่านนาฬิกาจาก global
"""
from datetime import timedelta

from django.conf import settings

from .statuses import PaymentStatus, RentalStatus

ONE_HOUR = timedelta(hours=1)

CANCELLABLE_PAYMENT_STATUSES = (PaymentStatus.PENDING, PaymentStatus.FAILED)

# สถานะที่ยกเลิกไม่ได้แล้ว (รถออกไปแล้ว หรือจบงานไปแล้ว)
NON_CANCELLABLE_RENTAL_STATUSES = (
    RentalStatus.COMPLETED,
    RentalStatus.ONGOING,
    RentalStatus.RETURN_REQUESTED,
    RentalStatus.RETURN_APPROVED,
    RentalStatus.CANCELLED,
)

RETURNABLE_RENTAL_STATUSES = (RentalStatus.CONFIRMED, RentalStatus.ONGOING)


def free_cancel_hours():
    return getattr(settings, 'RENTAL_FREE_CANCEL_HOURS', 2)


def hours_since_creation(rental, now):
    # นาฬิกาเพี้ยน (now < created_at) ก็ใช้ค่าสัมบูรณ์ ไม่ raise
    return int(abs(now - rental.created_at) // ONE_HOUR)


def can_cancel(rental, now=None):
    """Whether the customer may cancel: unpaid and not yet active."""
    return (
        rental.payment_status in CANCELLABLE_PAYMENT_STATUSES
        and rental.rental_status not in NON_CANCELLABLE_RENTAL_STATUSES
    )


def within_free_cancellation_window(rental, now, hours=None):
    """Pending and created no more than ``hours`` ago.

    Shown to the customer as a hint only; ``can_cancel`` is the gate.
    """
    if hours is None:
        hours = free_cancel_hours()
    return (
        rental.rental_status == RentalStatus.PENDING
        and abs(now - rental.created_at) <= timedelta(hours=hours)
    )


def can_request_return(rental):
    return (
        rental.rental_status in RETURNABLE_RENTAL_STATUSES
        and rental.payment_status == PaymentStatus.PAID
    )


def can_review(rental):
    return rental.rental_status == RentalStatus.RETURN_APPROVED and not rental.has_review


def can_upload_payment_proof(rental):
    return (
        rental.payment_status in CANCELLABLE_PAYMENT_STATUSES
        and rental.rental_status not in (RentalStatus.COMPLETED, RentalStatus.CANCELLED)
    )


def capabilities(rental, now):
    return {
        'can_cancel': can_cancel(rental, now),
        'can_cancel_free': within_free_cancellation_window(rental, now),
        'can_request_return': can_request_return(rental),
        'can_review': can_review(rental),
        'can_pay': can_upload_payment_proof(rental),
        'hours_since_creation': hours_since_creation(rental, now),
    }
