"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and display
user-friendly messages.

Each error carries a stable ``code`` (the name clients switch on) and the
HTTP status an adapter should answer with.  ``details`` holds the extra
context a client needs to reconcile its view (product name, remaining
quantity, ...).
"""

from __future__ import annotations

from typing import Any


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "DomainError"
    http_status = 400

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


# --- Validation: reported before storage is touched ---------------------------


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "ValidationError"


class EmptyCartError(ValidationError):
    code = "EmptyCart"


class InvalidAddressError(ValidationError):
    code = "InvalidAddress"


class InvalidCouponError(ValidationError):
    code = "InvalidCoupon"


class ProductUnavailableError(ValidationError):
    """Product is missing, inactive or out of stock."""

    code = "ProductUnavailable"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NotFound"
    http_status = 404


# --- Conflicts: the client's view is stale and must be re-fetched -------------


class ConflictError(DomainException):
    """Shared state moved under the caller (stock, lease, coupon)."""

    code = "Conflict"
    http_status = 409


class InsufficientStockError(ConflictError):
    code = "InsufficientStock"
    http_status = 400


class CouponAlreadyUsedError(ConflictError):
    code = "CouponAlreadyUsed"
    http_status = 400


class ReservationConflictError(ConflictError):
    """The last unit is held by another shopper."""

    code = "ReservationConflict"


class ReservationExpiredError(ConflictError):
    """A scarce cart line lost its lease before checkout."""

    code = "ReservationExpired"


# --- Transactional / fatal ----------------------------------------------------


class CommitFailedError(DomainException):
    """The commit transaction aborted and was rolled back.  Safe to retry."""

    code = "CommitFailed"
    http_status = 503


class InvariantViolationError(DomainException):
    """A state that the write discipline should make unreachable."""

    code = "InvariantViolation"
    http_status = 500
