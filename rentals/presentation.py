# rentals/presentation.py
# ตารางแปลงสถานะ -> ข้อความภาษาไทย / class ของ badge
# ทุกหน้าใช้ตารางนี้ที่เดียว ห้ามเขียน if/else แปลงสถานะซ้ำในแต่ละหน้า
from collections import namedtuple

from .exceptions import ConcurrentModificationError, InvalidTransitionError, ValidationError
from .statuses import CarStatus, PaymentStatus, RentalStatus

StatusBadge = namedtuple('StatusBadge', ['label', 'css_class', 'icon'])

UNKNOWN_CLASS = 'bg-gray-100 text-gray-800 border-gray-200'

RENTAL_STATUS_DISPLAY = {
    RentalStatus.PENDING: StatusBadge('รออนุมัติ', 'bg-yellow-100 text-yellow-800 border-yellow-200', 'clock'),
    RentalStatus.CONFIRMED: StatusBadge('อนุมัติแล้ว', 'bg-blue-100 text-blue-800 border-blue-200', 'check-circle'),
    RentalStatus.ONGOING: StatusBadge('กำลังเช่า', 'bg-indigo-100 text-indigo-800 border-indigo-200', 'car'),
    RentalStatus.RETURN_REQUESTED: StatusBadge('ขอคืนรถ', 'bg-orange-100 text-orange-800 border-orange-200', 'alert-circle'),
    RentalStatus.RETURN_APPROVED: StatusBadge('อนุมัติคืนรถแล้ว', 'bg-purple-100 text-purple-800 border-purple-200', 'check-circle'),
    RentalStatus.COMPLETED: StatusBadge('เสร็จสิ้น', 'bg-green-100 text-green-800 border-green-200', 'check-circle'),
    RentalStatus.CANCELLED: StatusBadge('ยกเลิก', 'bg-red-100 text-red-800 border-red-200', 'x-circle'),
}

PAYMENT_STATUS_DISPLAY = {
    PaymentStatus.PENDING: StatusBadge('รอชำระเงิน', 'bg-yellow-100 text-yellow-800 border-yellow-200', 'clock'),
    PaymentStatus.PENDING_VERIFICATION: StatusBadge('รอยืนยันการชำระเงิน', 'bg-blue-100 text-blue-800 border-blue-200', 'clock'),
    PaymentStatus.PAID: StatusBadge('ชำระเงินแล้ว', 'bg-green-100 text-green-800 border-green-200', 'check-circle'),
    PaymentStatus.REFUND_PENDING: StatusBadge('รอการคืนเงิน', 'bg-blue-100 text-blue-800 border-blue-200', 'clock'),
    PaymentStatus.REFUNDED: StatusBadge('คืนเงินแล้ว', 'bg-purple-100 text-purple-800 border-purple-200', 'check-circle'),
    PaymentStatus.FAILED: StatusBadge('ชำระเงินไม่สำเร็จ', 'bg-red-100 text-red-800 border-red-200', 'x-circle'),
    PaymentStatus.REJECTED: StatusBadge('การชำระเงินถูกปฏิเสธ', 'bg-red-100 text-red-800 border-red-200', 'x-circle'),
}

CAR_STATUS_DISPLAY = {
    CarStatus.AVAILABLE: StatusBadge('ว่าง', 'bg-green-500 text-white', 'check-circle'),
    CarStatus.RENTED: StatusBadge('ถูกเช่า', 'bg-blue-500 text-white', 'car'),
    CarStatus.MAINTENANCE: StatusBadge('ซ่อมบำรุง', 'bg-yellow-500 text-white', 'alert-circle'),
}

# แท็บหน้า "การจองของฉัน"
BOOKING_TABS = {
    'pending': (RentalStatus.PENDING,),
    'active': (RentalStatus.CONFIRMED, RentalStatus.ONGOING, RentalStatus.RETURN_REQUESTED),
    'history': (RentalStatus.COMPLETED, RentalStatus.CANCELLED, RentalStatus.RETURN_APPROVED),
}

BOOKING_TAB_LABELS = {
    'all': 'ทั้งหมด',
    'pending': 'รออนุมัติ',
    'active': 'ใช้งานอยู่',
    'history': 'ประวัติ',
}


def _badge(table, status):
    if status in table:
        return table[status]
    return StatusBadge(status or '-', UNKNOWN_CLASS, 'clock')


def rental_status_badge(status):
    return _badge(RENTAL_STATUS_DISPLAY, status)


def payment_status_badge(status):
    return _badge(PAYMENT_STATUS_DISPLAY, status)


def car_status_badge(status):
    return _badge(CAR_STATUS_DISPLAY, status)


def choices(table):
    """Django ``choices`` built from a display table."""
    return [(code, badge.label) for code, badge in table.items()]


def filter_by_tab(rentals, tab):
    statuses = BOOKING_TABS.get(tab)
    if statuses is None:
        return list(rentals)
    return [r for r in rentals if r.rental_status in statuses]


def tab_counts(rentals):
    rentals = list(rentals)
    counts = {tab: len(filter_by_tab(rentals, tab)) for tab in BOOKING_TABS}
    counts['all'] = len(rentals)
    return counts


def error_message(exc):
    """Thai message for a RentalError raised by the services."""
    if isinstance(exc, ValidationError):
        return ' '.join(exc.messages)
    if isinstance(exc, InvalidTransitionError):
        return (
            "ไม่สามารถทำรายการนี้ได้ในสถานะปัจจุบัน "
            f"({rental_status_badge(exc.rental_status).label} / {payment_status_badge(exc.payment_status).label})"
        )
    if isinstance(exc, ConcurrentModificationError):
        return "ข้อมูลการจองมีการเปลี่ยนแปลงระหว่างทำรายการ กรุณาโหลดหน้าใหม่แล้วลองอีกครั้ง"
    return str(exc)
