# rentals/exceptions.py
from django.core.exceptions import ValidationError as DjangoValidationError


class RentalError(Exception):
    """Base class for every failure raised by the rental core."""


class ValidationError(RentalError, DjangoValidationError):
    """Bad input to pricing or date computations.

    Subclasses Django's ValidationError so a form's ``clean()`` can let it
    propagate and have it rendered as a normal form error.
    """


class InvalidTransitionError(RentalError):
    def __init__(self, rental_status, payment_status, action, actor=None, reason=''):
        self.rental_status = rental_status
        self.payment_status = payment_status
        self.action = action
        self.actor = actor
        self.reason = reason
        message = (
            f"action '{action}' is not allowed for rental_status='{rental_status}', "
            f"payment_status='{payment_status}'"
        )
        if actor:
            message += f" (actor={actor})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConcurrentModificationError(RentalError):
    def __init__(self, rental_id, expected_version):
        self.rental_id = rental_id
        self.expected_version = expected_version
        super().__init__(
            f"rental {rental_id} changed since version {expected_version} was read"
        )
