"""
Payment Exception Hierarchy

Error kinds surfaced to the order-creation caller. Codes mirror the callable
error vocabulary (unauthenticated, not-found, ...) so clients can branch on them.
"""
from typing import Optional, Dict, Any


class PaymentError(Exception):
    """
    Base exception for all classified payment errors.

    Business-rule failures carry their message to the caller verbatim.
    Anything not classified is turned into InternalError before leaving
    the service layer.
    """

    status_code: int = 400

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API error response format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class UnauthenticatedError(PaymentError):
    """Caller identity is missing or could not be verified."""

    status_code = 401

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("unauthenticated", message, details)


class InvalidArgumentError(PaymentError):
    """
    Request arguments are malformed.

    Example:
    - Transaction ID missing or empty
    """

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("invalid-argument", message, details)


class NotFoundError(PaymentError):
    """Referenced transaction does not exist."""

    status_code = 404

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("not-found", message, details)


class PermissionDeniedError(PaymentError):
    """
    Caller is authenticated but may not act on this transaction.

    Example:
    - Caller email differs from the transaction's buyer email
    """

    status_code = 403

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("permission-denied", message, details)


class FailedPreconditionError(PaymentError):
    """
    Transaction is not in a state that allows the operation.

    Examples:
    - Status is not awaiting_payment
    - Amount missing or not strictly positive
    """

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("failed-precondition", message, details)


class InternalError(PaymentError):
    """Unexpected failure. Message is generic, details are never populated from internals."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("internal", message, details)


class GatewayError(Exception):
    """
    Payment gateway call failed.

    Raised by gateway clients; the order service converts it into InternalError
    so gateway internals never reach the caller.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
