"""Pricing & stock validation for submitted orders.

The submitting client is untrusted: claimed prices are discarded and every
line is re-priced from the product record at the moment the order is
accepted.
"""

from collections import OrderedDict
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.errors import PriceMismatchError, StockError

logger = structlog.get_logger(__name__)

# Rounding slack allowed between the declared and the recomputed total
PRICE_TOLERANCE = 1.0


@dataclass(frozen=True)
class LineRequest:
    product_id: str
    quantity: int
    claimed_price: float | None = None


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    name: str
    unit_price: float
    quantity: int

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def snapshot(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
        }


def parse_lines(raw_items) -> list[LineRequest]:
    """Turn raw ``[{"product_id", "quantity", "unit_price"?}]`` into line requests.

    Lines for the same product are merged so stock is checked against the
    combined quantity.
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError({"items": ["At least one item is required"]})

    merged: OrderedDict[str, LineRequest] = OrderedDict()
    for position, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError({"items": [f"Item {position} must be an object"]})

        product_id = raw.get("product_id")
        quantity = raw.get("quantity")
        if not product_id:
            raise ValidationError({"items": [f"Item {position} has no product_id"]})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": [f"Item {position} needs a whole quantity of at least 1"]})

        key = str(product_id)
        if key in merged:
            quantity += merged[key].quantity
        merged[key] = LineRequest(product_id=key, quantity=quantity, claimed_price=raw.get("unit_price"))

    return list(merged.values())


class PricingValidator:
    def __init__(self):
        self.products = current_domain.repository_for(Product)

    def price(self, lines: list[LineRequest]) -> tuple[list[PricedLine], float]:
        """Re-price ``lines`` from the catalogue and check stock. Mutates nothing.

        Raises ``ProductUnavailable`` for products that no longer resolve and
        ``StockError`` when a quantity exceeds what is on hand.
        """
        priced = []
        for line in lines:
            product = self.products.resolve(line.product_id)
            if not product.has_stock_for(line.quantity):
                raise StockError(
                    f"Only {product.stock} of {product.name} left",
                    product_id=line.product_id,
                    requested=line.quantity,
                    available=product.stock,
                )
            if line.claimed_price is not None and line.claimed_price != product.price:
                logger.info(
                    "stale_price_discarded",
                    product_id=line.product_id,
                    claimed=line.claimed_price,
                    actual=product.price,
                )
            priced.append(
                PricedLine(
                    product_id=line.product_id,
                    name=product.name,
                    unit_price=product.price,
                    quantity=line.quantity,
                )
            )

        subtotal = sum(line.line_total for line in priced)
        return priced, subtotal

    @staticmethod
    def check_total(declared_total: float, subtotal: float, discount_total: float) -> float:
        """Return the authoritative total; raise if the declared one is off by more than the tolerance."""
        expected = subtotal - discount_total
        if abs(declared_total - expected) > PRICE_TOLERANCE:
            raise PriceMismatchError(
                f"Order total changed: expected {expected:g}, got {declared_total:g}. Please refresh your cart.",
                declared=declared_total,
                expected=expected,
            )
        return expected

    def withdraw(self, priced: list[PricedLine]) -> None:
        """Take stock for every line, or for none of them."""
        taken = []
        for line in priced:
            if not self.products.withdraw_stock(line.product_id, line.quantity):
                for done in taken:
                    self.products.return_stock(done.product_id, done.quantity)
                raise StockError(
                    f"{line.name} sold out while the order was being placed",
                    product_id=line.product_id,
                    requested=line.quantity,
                )
            taken.append(line)

    def restock(self, items) -> None:
        """Inverse of ``withdraw`` for an order's item snapshot."""
        for item in items:
            self.products.return_stock(item.product_id, item.quantity)
