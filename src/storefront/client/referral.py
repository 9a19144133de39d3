"""Referral graph: attaching clients to the referrer who invited them."""

from datetime import datetime, timedelta

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.client.client import PLACEHOLDER_REFERRER_NAME, Client
from storefront.domain import storefront

logger = structlog.get_logger(__name__)

# A referred client counts as active with an order this recent
ACTIVE_REFERRAL_WINDOW = timedelta(days=30)


@storefront.command(part_of="Client")
class AttachReferral:
    """Record that ``client_id`` arrived through ``referrer_id``'s invite link."""

    client_id: Identifier(required=True)
    referrer_id: Identifier(required=True)


@storefront.command_handler(part_of=Client)
class AttachReferralHandler:
    @handle(AttachReferral)
    def attach_referral(self, command):
        clients = current_domain.repository_for(Client)
        client, _ = clients.ensure(command.client_id)

        if str(command.client_id) == str(command.referrer_id):
            logger.info("referral_rejected", client_id=str(command.client_id), reason="self_referral")
            return {"attached": False}

        if not client.attach_referrer(command.referrer_id):
            logger.info(
                "referral_rejected",
                client_id=str(command.client_id),
                referrer_id=str(command.referrer_id),
                reason="first_purchase_lock",
            )
            return {"attached": False}

        # Placeholder so the referrer's future commissions have a wallet to land in
        referrer, created = clients.ensure(command.referrer_id, name=PLACEHOLDER_REFERRER_NAME)
        referrer.record_referral_click()
        clients.add(client)
        clients.add(referrer)

        logger.info(
            "referral_attached",
            client_id=str(client.client_id),
            referrer_id=str(referrer.client_id),
            placeholder_created=created,
        )
        return {"attached": True}


def referrer_of(client: Client) -> Client | None:
    """The client's referrer, if it has one and it still exists."""
    if not client.referrer_id:
        return None
    return current_domain.repository_for(Client).find(client.referrer_id)


def referral_stats(referrer_id) -> dict:
    """Invite statistics: referred clients, how many ordered recently, link clicks."""
    from storefront.order.order import Order

    clients = current_domain.repository_for(Client)
    orders = current_domain.repository_for(Order)
    referrer = clients.find(referrer_id)
    referred = clients.referred_by(referrer_id)

    since = datetime.now() - ACTIVE_REFERRAL_WINDOW
    active = sum(1 for friend in referred if orders.placed_since(friend.client_id, since))

    return {
        "total": len(referred),
        "active": active,
        "clicks": referrer.referral_clicks if referrer else 0,
    }
