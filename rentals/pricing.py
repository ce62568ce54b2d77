# rentals/pricing.py
"""
คำนวณจำนวนวันและราคารวมของการจอง

ราคาใช้ Decimal ทั้งหมด (ทศนิยม 2 ตำแหน่ง) เพื่อไม่ให้มีเศษจาก float
ค่าที่ผิด (NaN, ติดลบ, ไม่ใช่ตัวเลข) จะ raise ValidationError ทันที
ไม่แปลงเป็น 0 แบบเงียบๆ
"""
import math
from collections import namedtuple
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone

from .exceptions import ValidationError

CENT = Decimal('0.01')
SECONDS_PER_DAY = 86400

Quote = namedtuple(
    'Quote',
    ['days', 'daily_rate', 'insurance_rate', 'rental_subtotal', 'insurance_subtotal', 'total'],
)


def to_money(value):
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def coerce_rate(value, field='daily_rate', allow_missing=False):
    if value is None or value == '':
        if allow_missing:
            return Decimal('0')
        raise ValidationError(f'กรุณาระบุ {field}', code='missing_rate')

    if isinstance(value, bool):
        raise ValidationError(f'{field} ไม่ใช่ตัวเลข', code='invalid_rate')

    try:
        if isinstance(value, float):
            rate = Decimal(repr(value))
        else:
            rate = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field} ไม่ใช่ตัวเลข: {value!r}', code='invalid_rate')

    if not rate.is_finite():
        raise ValidationError(f'{field} ไม่ใช่ตัวเลขที่ถูกต้อง: {value!r}', code='invalid_rate')
    if rate < 0:
        raise ValidationError(f'{field} ต้องไม่ติดลบ', code='negative_rate')
    return rate


def compute_days(start_date, end_date):
    if start_date is None or end_date is None:
        raise ValidationError('กรุณาระบุวันที่เริ่มต้นและวันที่สิ้นสุด', code='missing_dates')

    # datetime เป็น subclass ของ date ต้องเช็คก่อน
    if isinstance(start_date, datetime) and isinstance(end_date, datetime):
        seconds = (end_date - start_date).total_seconds()
        days = math.ceil(seconds / SECONDS_PER_DAY)
    elif isinstance(start_date, datetime) or isinstance(end_date, datetime):
        raise ValidationError('วันที่เริ่มต้นและสิ้นสุดต้องเป็นชนิดเดียวกัน', code='mixed_dates')
    else:
        days = (end_date - start_date).days

    if days <= 0:
        raise ValidationError('วันที่สิ้นสุดต้องเป็นวันหลังจากวันที่เริ่มต้น', code='invalid_range')
    return days


def compute_total(days, daily_rate, insurance_rate=None):
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        raise ValidationError(f'จำนวนวันไม่ถูกต้อง: {days!r}', code='invalid_days')
    daily = coerce_rate(daily_rate, 'daily_rate')
    insurance = coerce_rate(insurance_rate, 'insurance_rate', allow_missing=True)
    return to_money(days * (daily + insurance))


def quote(start_date, end_date, daily_rate, insurance_rate=None, today=None):
    """Validate a booking request and price it.

    ``today`` defaults to the local date of the current time; pass it in
    explicitly from tests.
    """
    if today is None:
        today = timezone.localdate()

    if start_date is None or end_date is None:
        raise ValidationError('กรุณาระบุวันที่เริ่มต้นและวันที่สิ้นสุด', code='missing_dates')
    start_day = start_date.date() if isinstance(start_date, datetime) else start_date
    if isinstance(start_day, date) and start_day < today:
        raise ValidationError('วันที่เริ่มต้นต้องไม่เป็นวันที่ผ่านมาแล้ว', code='start_in_past')

    days = compute_days(start_date, end_date)
    daily = coerce_rate(daily_rate, 'daily_rate')
    insurance = coerce_rate(insurance_rate, 'insurance_rate', allow_missing=True)
    total = compute_total(days, daily, insurance)
    if total <= 0:
        raise ValidationError('ไม่สามารถคำนวณราคารวมได้ โปรดตรวจสอบวันที่อีกครั้ง', code='zero_total')

    return Quote(
        days=days,
        daily_rate=to_money(daily),
        insurance_rate=to_money(insurance),
        rental_subtotal=to_money(days * daily),
        insurance_subtotal=to_money(days * insurance),
        total=total,
    )
