# rentals/lifecycle.py
"""
กฎการเปลี่ยนสถานะของการจอง (state machine)

- ไม่มีการเขียนฐานข้อมูล
- ไม่มี side effect
- ทุกการเปลี่ยนสถานะต้องผ่าน apply_transition ก่อนบันทึกจริงเสมอ

rental_status กับ payment_status เดินแยกกันได้ แต่ action แต่ละตัวจะกำหนดว่า
แต่ละฝั่งเปลี่ยนเป็นอะไร และต้องเป็นเส้นทางที่อยู่ในตารางด้านล่างเท่านั้น
"""
from collections import namedtuple

from . import eligibility
from .exceptions import InvalidTransitionError
from .statuses import Action, Actor, CarStatus, PaymentStatus, RentalStatus

# ============================================================
# STATE DEFINITIONS
# ============================================================

RENTAL_TRANSITIONS = {
    RentalStatus.PENDING: {RentalStatus.CONFIRMED, RentalStatus.CANCELLED},
    RentalStatus.CONFIRMED: {RentalStatus.ONGOING, RentalStatus.CANCELLED, RentalStatus.RETURN_REQUESTED},
    RentalStatus.ONGOING: {RentalStatus.RETURN_REQUESTED},
    RentalStatus.RETURN_REQUESTED: {RentalStatus.RETURN_APPROVED, RentalStatus.CONFIRMED, RentalStatus.ONGOING},
    RentalStatus.RETURN_APPROVED: {RentalStatus.COMPLETED},
    RentalStatus.COMPLETED: set(),
    RentalStatus.CANCELLED: set(),
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PENDING_VERIFICATION, PaymentStatus.FAILED},
    PaymentStatus.PENDING_VERIFICATION: {PaymentStatus.PAID, PaymentStatus.REJECTED, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUND_PENDING},
    PaymentStatus.REFUND_PENDING: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING_VERIFICATION},
    PaymentStatus.REJECTED: set(),
    PaymentStatus.REFUNDED: set(),
}

TERMINAL_RENTAL_STATUSES = frozenset({RentalStatus.COMPLETED, RentalStatus.CANCELLED})
TERMINAL_PAYMENT_STATUSES = frozenset({PaymentStatus.REJECTED, PaymentStatus.REFUNDED})

# ใครทำ action ไหนได้บ้าง
ACTION_ACTORS = {
    Action.CANCEL: {Actor.CUSTOMER},
    Action.UPLOAD_PAYMENT_PROOF: {Actor.CUSTOMER},
    Action.APPROVE_BOOKING: {Actor.SHOP},
    Action.REJECT_BOOKING: {Actor.SHOP},
    Action.VERIFY_PAYMENT: {Actor.SHOP},
    Action.REJECT_PAYMENT: {Actor.SHOP},
    Action.START_RENTAL: {Actor.SHOP},
    Action.REQUEST_RETURN: {Actor.CUSTOMER},
    Action.APPROVE_RETURN: {Actor.SHOP},
    Action.REJECT_RETURN: {Actor.SHOP},
    Action.COMPLETE: {Actor.SYSTEM, Actor.SHOP},
}


_RentalStateBase = namedtuple(
    'RentalState',
    ['rental_status', 'payment_status', 'status_before_return', 'has_review'],
    defaults=(None, False),
)


class RentalState(_RentalStateBase):
    """Immutable snapshot of the status fields of one rental."""

    __slots__ = ()

    @classmethod
    def from_rental(cls, rental):
        return cls(
            rental.rental_status,
            rental.payment_status,
            getattr(rental, 'status_before_return', None) or None,
            bool(getattr(rental, 'has_review', False)),
        )

    @property
    def is_terminal(self):
        return self.rental_status in TERMINAL_RENTAL_STATUSES


# car_status = None แปลว่าไม่ต้องแตะสถานะรถ
Transition = namedtuple('Transition', ['action', 'previous', 'state', 'car_status'])


# ============================================================
# DOMAIN RULES
# ============================================================

def can_transition_rental(from_status, to_status):
    if from_status in TERMINAL_RENTAL_STATUSES:
        return False
    return to_status in RENTAL_TRANSITIONS.get(from_status, set())


def can_transition_payment(from_status, to_status):
    if from_status in TERMINAL_PAYMENT_STATUSES:
        return False
    return to_status in PAYMENT_TRANSITIONS.get(from_status, set())


def _reject(state, action, actor, reason):
    raise InvalidTransitionError(state.rental_status, state.payment_status, action, actor, reason)


def _require(condition, state, action, actor, reason):
    if not condition:
        _reject(state, action, actor, reason)


def _next_state(state, action, actor):
    """Compute (new_state, car_status) or raise InvalidTransitionError."""
    rental_status = state.rental_status
    payment_status = state.payment_status

    if action == Action.CANCEL:
        _require(eligibility.can_cancel(state), state, action, actor, 'booking is paid or already active')
        car_status = CarStatus.AVAILABLE if rental_status == RentalStatus.CONFIRMED else None
        return state._replace(rental_status=RentalStatus.CANCELLED), car_status

    if action == Action.UPLOAD_PAYMENT_PROOF:
        _require(
            payment_status in (PaymentStatus.PENDING, PaymentStatus.FAILED),
            state, action, actor, 'payment is not awaiting a proof',
        )
        return state._replace(payment_status=PaymentStatus.PENDING_VERIFICATION), None

    if action == Action.APPROVE_BOOKING:
        _require(rental_status == RentalStatus.PENDING, state, action, actor, 'booking is not pending')
        return state._replace(rental_status=RentalStatus.CONFIRMED), CarStatus.RENTED

    if action == Action.REJECT_BOOKING:
        _require(rental_status == RentalStatus.PENDING, state, action, actor, 'booking is not pending')
        # เงินที่จ่ายมาแล้วต้องคืน สลิปที่ยังไม่ตรวจถือว่าถูกปฏิเสธ
        if payment_status == PaymentStatus.PAID:
            payment_status = PaymentStatus.REFUND_PENDING
        elif payment_status == PaymentStatus.PENDING_VERIFICATION:
            payment_status = PaymentStatus.REJECTED
        return state._replace(rental_status=RentalStatus.CANCELLED, payment_status=payment_status), None

    if action == Action.VERIFY_PAYMENT:
        _require(
            payment_status == PaymentStatus.PENDING_VERIFICATION,
            state, action, actor, 'no payment proof awaiting verification',
        )
        return state._replace(payment_status=PaymentStatus.PAID), None

    if action == Action.REJECT_PAYMENT:
        _require(
            payment_status == PaymentStatus.PENDING_VERIFICATION,
            state, action, actor, 'no payment proof awaiting verification',
        )
        return state._replace(payment_status=PaymentStatus.FAILED), None

    if action == Action.START_RENTAL:
        _require(rental_status == RentalStatus.CONFIRMED, state, action, actor, 'booking is not confirmed')
        _require(payment_status == PaymentStatus.PAID, state, action, actor, 'booking is not paid')
        return state._replace(rental_status=RentalStatus.ONGOING), None

    if action == Action.REQUEST_RETURN:
        _require(eligibility.can_request_return(state), state, action, actor, 'booking is not active and paid')
        return state._replace(
            rental_status=RentalStatus.RETURN_REQUESTED,
            status_before_return=rental_status,
        ), None

    if action == Action.APPROVE_RETURN:
        _require(rental_status == RentalStatus.RETURN_REQUESTED, state, action, actor, 'no return requested')
        return state._replace(rental_status=RentalStatus.RETURN_APPROVED), CarStatus.AVAILABLE

    if action == Action.REJECT_RETURN:
        _require(rental_status == RentalStatus.RETURN_REQUESTED, state, action, actor, 'no return requested')
        previous = state.status_before_return
        if previous not in eligibility.RETURNABLE_RENTAL_STATUSES:
            previous = RentalStatus.CONFIRMED
        return state._replace(rental_status=previous, status_before_return=None), None

    if action == Action.COMPLETE:
        _require(rental_status == RentalStatus.RETURN_APPROVED, state, action, actor, 'return is not approved')
        return state._replace(rental_status=RentalStatus.COMPLETED), None

    _reject(state, action, actor, 'unknown action')


def apply_transition(state, action, actor):
    """Validate ``action`` by ``actor`` against ``state``.

    Returns a ``Transition`` holding the resulting state and the car status
    the caller must persist alongside it (or ``None``). Raises
    ``InvalidTransitionError`` for anything illegal; never returns the input
    state unchanged.
    """
    if action not in ACTION_ACTORS:
        _reject(state, action, actor, 'unknown action')
    if actor not in ACTION_ACTORS[action]:
        _reject(state, action, actor, f'{actor} may not {action}')
    if state.is_terminal:
        _reject(state, action, actor, 'booking is closed')

    new_state, car_status = _next_state(state, action, actor)

    if new_state.rental_status != state.rental_status:
        _require(
            can_transition_rental(state.rental_status, new_state.rental_status),
            state, action, actor, f'no edge {state.rental_status} -> {new_state.rental_status}',
        )
    if new_state.payment_status != state.payment_status:
        _require(
            can_transition_payment(state.payment_status, new_state.payment_status),
            state, action, actor, f'no edge {state.payment_status} -> {new_state.payment_status}',
        )

    return Transition(action, state, new_state, car_status)


def settle_refund(state, actor):
    """Move a refund from ``refund_pending`` to ``refunded``.

    Only the payment side changes, so this is allowed on a cancelled rental.
    """
    if actor != Actor.SHOP:
        _reject(state, 'settle_refund', actor, f'{actor} may not settle refunds')
    if state.payment_status != PaymentStatus.REFUND_PENDING:
        _reject(state, 'settle_refund', actor, 'no refund pending')
    return Transition('settle_refund', state, state._replace(payment_status=PaymentStatus.REFUNDED), None)


def available_actions(state, actor):
    actions = []
    for action in Action.ALL:
        try:
            apply_transition(state, action, actor)
        except InvalidTransitionError:
            continue
        actions.append(action)
    return actions
