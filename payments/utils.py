# payments/utils.py
# สร้างข้อความ (payload) สำหรับ QR พร้อมเพย์ ตามมาตรฐาน EMVCo
from decimal import Decimal, InvalidOperation

PROMPTPAY_AID = 'A000000677010111'

TARGET_PHONE = '01'
TARGET_NATIONAL_ID = '02'
TARGET_EWALLET = '03'


def crc16(data: bytes):
    # CRC-16/CCITT-FALSE
    crc = 0xFFFF
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if (crc & 0x8000):
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return crc


def format_field(id, value):
    return '{:02}{:02}{}'.format(int(id), len(value), value)


def normalize_target(id_or_phone):
    """Return ``(target_type, formatted_target)`` for a PromptPay id."""
    target = ''.join(ch for ch in str(id_or_phone) if ch.isdigit())

    if len(target) == 15:  # e-wallet
        return TARGET_EWALLET, target
    if len(target) == 13:  # บัตรประชาชน / เลขผู้เสียภาษี
        return TARGET_NATIONAL_ID, target
    if len(target) == 10 and target.startswith('0'):
        # 08x-xxx-xxxx -> 0066 8x xxx xxxx
        return TARGET_PHONE, '0066' + target[1:]
    if len(target) == 11 and target.startswith('66'):
        return TARGET_PHONE, '00' + target

    raise ValueError(f"invalid PromptPay id: {id_or_phone!r}")


def format_amount(amount):
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValueError(f"invalid amount: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise ValueError(f"invalid amount: {amount!r}")
    return '{:.2f}'.format(value)


def generate_promptpay_payload(id_or_phone, amount=None):
    target_type, target = normalize_target(id_or_phone)

    data = [
        format_field(0, '01'),
        # 11 = QR ใช้ซ้ำได้ (ไม่ระบุยอด), 12 = QR ใช้ครั้งเดียว (ระบุยอด)
        format_field(1, '12' if amount is not None else '11'),
        format_field(29,
            format_field(0, PROMPTPAY_AID) +
            format_field(target_type, target)
        ),
        format_field(58, 'TH'),
        format_field(53, '764'),
    ]

    if amount is not None:
        data.append(format_field(54, format_amount(amount)))

    raw_data = ''.join(data) + '6304'
    crc_val = crc16(raw_data.encode('ascii'))
    return raw_data + '{:04X}'.format(crc_val)
