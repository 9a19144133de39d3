"""Order cancellation: operator cancels (New → Cancelled), stock and points go back."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.client.client import Client
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus, TransitionOutcome
from storefront.order.pricing import PricingValidator
from storefront.wallet.ledger import Ledger
from storefront.wallet.transaction import TransactionKind

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id: Identifier(required=True)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = current_domain.repository_for(Order).claim(command.order_id, OrderStatus.CANCELLED)
        if order is None:
            logger.info("order_already_cancelled", order_id=str(command.order_id))
            return {"status": TransitionOutcome.ALREADY_DONE.value, "order_id": str(command.order_id)}

        PricingValidator().restock(order.items)

        refunded = order.pricing.bonuses_used or 0
        if refunded:
            client, _ = current_domain.repository_for(Client).ensure(order.client_id)
            Ledger().credit(
                client,
                refunded,
                f"Refund for cancelled order #{order.id}",
                kind=TransactionKind.REFUND,
                order_id=order.id,
            )

        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            client_id=str(order.client_id),
            bonuses_refunded=refunded,
        )
        return {
            "status": TransitionOutcome.OK.value,
            "order_id": str(order.id),
            "client_id": str(order.client_id),
            "bonuses_refunded": refunded,
        }
