"""Discount aggregate: promo codes offered by the shop."""

from enum import Enum

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Float, String, Text

from storefront.domain import storefront
from storefront.shared.points import percent_of, round_half_up


class DiscountType(Enum):
    PERCENT = "percent"
    FIXED = "fixed"


@storefront.aggregate
class Discount:
    """A promo code. Reference data: orders read it, nothing in the order flow writes it."""

    code: String(identifier=True, required=True, max_length=50)
    discount_type: String(choices=DiscountType, default=DiscountType.PERCENT.value)
    value: Float(required=True, min_value=0.0)
    is_active: Boolean(default=True)
    label: String(max_length=100)
    description: Text()

    @invariant.post
    def percent_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENT.value and self.value is not None and self.value > 100:
            raise ValidationError({"value": ["A percent discount cannot exceed 100"]})

    def amount_for(self, subtotal: float) -> int:
        """Discount granted on ``subtotal``, never more than the subtotal itself."""
        if self.discount_type == DiscountType.PERCENT.value:
            amount = percent_of(subtotal, self.value)
        else:
            amount = round_half_up(self.value)
        return max(0, min(amount, int(subtotal)))

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False


@storefront.repository(part_of=Discount)
class DiscountRepository:
    def find_by_code(self, code: str) -> Discount | None:
        try:
            return self.get(code)
        except ObjectNotFoundError:
            return None
