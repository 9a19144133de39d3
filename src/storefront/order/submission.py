"""Order submission: command and handler.

Everything is validated before anything is written: prices, stock,
discounts and bonus spend. Only then are stock taken, points debited and
the order persisted, all in the handler's unit of work.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.client.client import Client
from storefront.domain import storefront
from storefront.order.discounts import DiscountEngine
from storefront.order.order import DeliveryDetails, Order, OrderPricing
from storefront.order.pricing import PricingValidator, parse_lines
from storefront.wallet.ledger import Ledger
from storefront.wallet.transaction import TransactionKind

logger = structlog.get_logger(__name__)

_DELIVERY_FIELDS = {"recipient", "phone", "address", "payment_method", "comment", "username"}


@storefront.command(part_of="Order")
class SubmitOrder:
    client_id: Identifier(required=True)
    items: Text(required=True)  # JSON: [{"product_id", "quantity", "unit_price"?}]
    requested_total: Float(required=True, min_value=0.0)
    bonus_points: Integer(default=0, min_value=0)
    promo_code: String(max_length=50)
    delivery: Text()  # JSON object, see DeliveryDetails


def _load_json(raw, field):
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        raise ValidationError({field: ["Must be valid JSON"]}) from None


def _delivery_from(raw) -> DeliveryDetails | None:
    if not raw:
        return None

    data = _load_json(raw, "delivery")
    if not isinstance(data, dict):
        raise ValidationError({"delivery": ["Must be an object"]})
    unknown = set(data) - _DELIVERY_FIELDS
    if unknown:
        raise ValidationError({"delivery": [f"Unknown fields: {', '.join(sorted(unknown))}"]})
    return DeliveryDetails(**data)


@storefront.command_handler(part_of=Order)
class SubmitOrderHandler:
    @handle(SubmitOrder)
    def submit_order(self, command):
        lines = parse_lines(_load_json(command.items, "items"))
        delivery = _delivery_from(command.delivery)

        clients = current_domain.repository_for(Client)
        client = clients.find(command.client_id)
        balance = client.bonus_balance if client else 0

        validator = PricingValidator()
        priced, subtotal = validator.price(lines)
        discounts = DiscountEngine().evaluate(
            command.client_id,
            subtotal,
            promo_code=command.promo_code,
            bonus_points=command.bonus_points or 0,
            balance=balance,
        )
        total = validator.check_total(command.requested_total, subtotal, discounts.total)

        # Validated; from here on state changes
        if client is None:
            client, _ = clients.ensure(command.client_id)
        if delivery is not None:
            client.update_contact(name=delivery.recipient, username=delivery.username, phone=delivery.phone)
        clients.add(client)

        validator.withdraw(priced)

        order = Order.place(
            client_id=command.client_id,
            items=[line.snapshot() for line in priced],
            pricing=OrderPricing(
                subtotal=subtotal,
                new_customer_discount=discounts.new_customer,
                promo_discount=discounts.promo,
                promo_code=discounts.promo_code,
                bonuses_used=discounts.bonuses,
                total=total,
            ),
            delivery=delivery,
        )
        if discounts.bonuses:
            Ledger().debit(
                client,
                discounts.bonuses,
                f"Payment for order #{order.id}",
                kind=TransactionKind.REDEMPTION,
                order_id=order.id,
            )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_submitted",
            order_id=str(order.id),
            client_id=str(command.client_id),
            subtotal=subtotal,
            discount_total=discounts.total,
            total=total,
        )
        return {"order_id": str(order.id), "total": total}
