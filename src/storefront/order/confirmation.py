"""Order confirmation: operator hands the order over (New → Completed)."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.client.client import Client
from storefront.client.referral import referrer_of
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus, TransitionOutcome
from storefront.wallet.ledger import Ledger
from storefront.wallet.rewards import grant_completion_rewards

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ConfirmOrder:
    order_id: Identifier(required=True)


@storefront.command_handler(part_of=Order)
class ConfirmOrderHandler:
    @handle(ConfirmOrder)
    def confirm_order(self, command):
        order = current_domain.repository_for(Order).claim(command.order_id, OrderStatus.COMPLETED)
        if order is None:
            logger.info("order_already_completed", order_id=str(command.order_id))
            return {"status": TransitionOutcome.ALREADY_DONE.value, "order_id": str(command.order_id)}

        clients = current_domain.repository_for(Client)
        client, _ = clients.ensure(order.client_id)
        client.record_completed_order()
        clients.add(client)

        rewards = grant_completion_rewards(Ledger(), client, order, referrer=referrer_of(client))

        logger.info(
            "order_completed",
            order_id=str(order.id),
            client_id=str(client.client_id),
            cashback=rewards.cashback,
            welcome_bonus=rewards.welcome_bonus,
            referrer_id=rewards.referrer_id,
            commission=rewards.commission,
        )
        return {
            "status": TransitionOutcome.OK.value,
            "order_id": str(order.id),
            "client_id": str(client.client_id),
            "cashback": rewards.cashback,
            "welcome_bonus": rewards.welcome_bonus,
            "referrer_id": rewards.referrer_id,
            "invite_bonus": rewards.invite_bonus,
            "commission": rewards.commission,
        }
