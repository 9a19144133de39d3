"""Error taxonomy for the storefront.

Malformed input is reported with Protean's ``ValidationError``. Everything
else a caller can trip over derives from ``StorefrontError`` and carries a
stable ``ErrorCode`` plus a message that is safe to show to the customer.
"""

from enum import Enum


class ErrorCode(Enum):
    STOCK = "stock_error"
    PRICE_MISMATCH = "price_mismatch"
    BALANCE = "balance_error"
    TRANSITION = "transition_error"
    NOT_FOUND = "not_found"
    UPSTREAM_NOTIFY = "upstream_notify_error"


class StorefrontError(Exception):
    """Base for all business-rule failures raised by the storefront."""

    code: ErrorCode

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.code.value, "message": self.message}


class StockError(StorefrontError):
    """Requested quantity exceeds the product's current stock."""

    code = ErrorCode.STOCK


class PriceMismatchError(StorefrontError):
    """Declared total diverges from the recomputed total beyond tolerance."""

    code = ErrorCode.PRICE_MISMATCH


class BalanceError(StorefrontError):
    """Bonus-point spend cannot be honoured."""

    code = ErrorCode.BALANCE


class InsufficientBalance(BalanceError):
    """A debit larger than the wallet balance."""


class TransitionError(StorefrontError):
    """The order cannot move to the requested state."""

    code = ErrorCode.TRANSITION


class NotFoundError(StorefrontError):
    code = ErrorCode.NOT_FOUND


class ProductUnavailable(NotFoundError):
    """A product referenced by an order line no longer resolves."""


class UpstreamNotifyError(StorefrontError):
    """Delivery to the messenger failed. Never fatal."""

    code = ErrorCode.UPSTREAM_NOTIFY
