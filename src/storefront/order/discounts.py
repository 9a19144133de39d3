"""Discount engine: new-customer discount, promo codes and bonus-point spend."""

from dataclasses import dataclass

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.discount import Discount
from storefront.errors import BalanceError, InsufficientBalance
from storefront.order.order import Order
from storefront.shared.points import percent_of

# Reserved code customers enter to claim the one-time new-customer discount
NEW_CUSTOMER_CODE = "new_client_10"
NEW_CUSTOMER_PERCENT = 10


@dataclass
class DiscountBreakdown:
    new_customer: int = 0
    promo: int = 0
    promo_code: str | None = None
    bonuses: int = 0

    @property
    def total(self) -> int:
        return self.new_customer + self.promo + self.bonuses


class DiscountEngine:
    """Decides what an order may knock off its subtotal.

    Eligibility is always recomputed from order history; nothing cached on
    the client is trusted for money decisions.
    """

    def __init__(self):
        self.orders = current_domain.repository_for(Order)
        self.discounts = current_domain.repository_for(Discount)

    def is_new_customer(self, client_id) -> bool:
        """True while no live order of the client used the new-customer discount."""
        for order in self.orders.live_for_client(client_id):
            pricing = order.pricing
            if (pricing.new_customer_discount or 0) > 0 or pricing.promo_code == NEW_CUSTOMER_CODE:
                return False
        return True

    def evaluate(
        self,
        client_id,
        subtotal: float,
        promo_code: str | None = None,
        bonus_points: int = 0,
        balance: int = 0,
    ) -> DiscountBreakdown:
        breakdown = DiscountBreakdown()

        if promo_code == NEW_CUSTOMER_CODE:
            # An ineligible client just gets nothing; the declared total will tell
            if self.is_new_customer(client_id):
                breakdown.promo_code = promo_code
                breakdown.new_customer = percent_of(subtotal, NEW_CUSTOMER_PERCENT)
        elif promo_code:
            discount = self.discounts.find_by_code(promo_code)
            if discount is None or not discount.is_active:
                raise ValidationError({"promo_code": [f"Promo code {promo_code} is not valid"]})
            breakdown.promo_code = promo_code
            breakdown.promo = discount.amount_for(subtotal)

        breakdown.bonuses = self._bonus_spend(bonus_points, balance, subtotal - breakdown.total)
        return breakdown

    @staticmethod
    def _bonus_spend(requested: int, balance: int, remaining: float) -> int:
        """Validate the requested spend. Never clamps: the client computed its total with it."""
        if requested < 0:
            raise ValidationError({"bonus_points": ["Bonus points to spend cannot be negative"]})
        if requested > balance:
            raise InsufficientBalance(
                f"Not enough bonus points: {balance} available, {requested} requested",
                balance=balance,
                requested=requested,
            )
        if requested > remaining:
            raise BalanceError(
                f"Cannot spend {requested} points on an order of {remaining:g}",
                requested=requested,
                remaining=remaining,
            )
        return requested
