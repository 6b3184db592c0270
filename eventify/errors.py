"""Error taxonomy shared by the checkout and submission flows.

Every error carries a code and a user-safe message. Only one of them is
shown to the user per attempt (see user_message).
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes."""

    VALIDATION = "VALIDATION"
    UPLOAD = "UPLOAD"
    DOMAIN = "DOMAIN"
    ROLLBACK = "ROLLBACK"
    PAYMENT_INIT = "PAYMENT_INIT"
    INIT_ABORTED = "INIT_ABORTED"


class EventifyError(Exception):
    """Base error with code, user-safe message and optional HTTP status."""

    code: ErrorCode = ErrorCode.VALIDATION
    default_status = 400

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(EventifyError):
    """Local, pre-network rejection (bad file, malformed email, empty cart)."""

    code = ErrorCode.VALIDATION


class UploadError(EventifyError):
    """Network or storage failure while uploading an asset."""

    code = ErrorCode.UPLOAD
    default_status = 502


class DomainError(EventifyError):
    """The backend rejected a create/update call, or could not be reached."""

    code = ErrorCode.DOMAIN
    default_status = 502

    @property
    def is_network(self) -> bool:
        return self.status_code is None


class RollbackError(EventifyError):
    """A compensating delete failed. Never shown to the user."""

    code = ErrorCode.ROLLBACK
    default_status = 500


class PaymentInitError(EventifyError):
    """Order initialization failed; `reason` drives the user message."""

    code = ErrorCode.PAYMENT_INIT
    default_status = 502

    OUT_OF_STOCK = "out_of_stock"
    INVALID_ORDER = "invalid_order"
    NETWORK = "network"
    GENERIC = "generic"

    def __init__(self, message: str, *, reason: str = GENERIC, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.reason = reason


class InitializationAborted(EventifyError):
    """An initialization was superseded by a newer one or torn down."""

    code = ErrorCode.INIT_ABORTED
    default_status = 409

    def __init__(self, reason: str = "superseded") -> None:
        super().__init__(f"Order initialization {reason}")
        self.reason = reason


GENERIC_MESSAGE = "Something went wrong. Please try again."


def user_message(error: BaseException) -> str:
    """Single user-facing message for a failed attempt."""
    if isinstance(error, EventifyError):
        return error.message or GENERIC_MESSAGE
    return GENERIC_MESSAGE
