"""Domain errors raised by the subscription services.

Each error carries the HTTP status it maps to; ``main.py`` installs a single
handler that renders them as ``{"message": ...}``.
"""
from fastapi import status


class SubscriptionError(Exception):
    """Base class for subscription workflow failures."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SubscriptionError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(SubscriptionError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(SubscriptionError):
    """The request clashes with the current subscription state."""


class AlreadySubscribedError(ConflictError):
    pass


class InvalidTransitionError(ConflictError):
    pass


class PaymentNotCompleteError(SubscriptionError):
    """The gateway does not report the payment intent as succeeded."""

    def __init__(self, payment_status: str):
        super().__init__(f"Payment not completed. Status: {payment_status}")
        self.payment_status = payment_status


class InvalidRequestError(SubscriptionError):
    pass


class PaymentGatewayError(SubscriptionError):
    """The payment processor call failed. The message never carries processor internals."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, operation: str, message: str = "Payment processor request failed"):
        super().__init__(message)
        self.operation = operation
