# rentals/statuses.py
# ค่าคงที่ของสถานะทั้งหมด (ใช้ร่วมกันทั้ง models, lifecycle, presentation)


class RentalStatus:
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    ONGOING = 'ongoing'
    RETURN_REQUESTED = 'return_requested'
    RETURN_APPROVED = 'return_approved'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    ALL = (
        PENDING,
        CONFIRMED,
        ONGOING,
        RETURN_REQUESTED,
        RETURN_APPROVED,
        COMPLETED,
        CANCELLED,
    )


class PaymentStatus:
    PENDING = 'pending'
    PENDING_VERIFICATION = 'pending_verification'
    PAID = 'paid'
    REFUND_PENDING = 'refund_pending'
    REFUNDED = 'refunded'
    FAILED = 'failed'
    REJECTED = 'rejected'

    ALL = (
        PENDING,
        PENDING_VERIFICATION,
        PAID,
        REFUND_PENDING,
        REFUNDED,
        FAILED,
        REJECTED,
    )


class CarStatus:
    AVAILABLE = 'available'
    RENTED = 'rented'
    MAINTENANCE = 'maintenance'

    ALL = (AVAILABLE, RENTED, MAINTENANCE)


class Actor:
    CUSTOMER = 'customer'
    SHOP = 'shop'
    SYSTEM = 'system'

    ALL = (CUSTOMER, SHOP, SYSTEM)


class Action:
    CANCEL = 'cancel'
    UPLOAD_PAYMENT_PROOF = 'upload_payment_proof'
    APPROVE_BOOKING = 'approve_booking'
    REJECT_BOOKING = 'reject_booking'
    VERIFY_PAYMENT = 'verify_payment'
    REJECT_PAYMENT = 'reject_payment'
    START_RENTAL = 'start_rental'
    REQUEST_RETURN = 'request_return'
    APPROVE_RETURN = 'approve_return'
    REJECT_RETURN = 'reject_return'
    COMPLETE = 'complete'

    ALL = (
        CANCEL,
        UPLOAD_PAYMENT_PROOF,
        APPROVE_BOOKING,
        REJECT_BOOKING,
        VERIFY_PAYMENT,
        REJECT_PAYMENT,
        START_RENTAL,
        REQUEST_RETURN,
        APPROVE_RETURN,
        REJECT_RETURN,
        COMPLETE,
    )


# สถานะที่ถือว่ารถยังถูกใช้อยู่ (ใช้เช็ควันจองทับกัน)
ACTIVE_RENTAL_STATUSES = (
    RentalStatus.PENDING,
    RentalStatus.CONFIRMED,
    RentalStatus.ONGOING,
    RentalStatus.RETURN_REQUESTED,
)

# สถานะที่รถอยู่กับลูกค้าแล้ว (ร้านอนุมัติแล้ว ยังไม่ได้คืน)
CAR_HOLDING_RENTAL_STATUSES = (
    RentalStatus.CONFIRMED,
    RentalStatus.ONGOING,
    RentalStatus.RETURN_REQUESTED,
)
