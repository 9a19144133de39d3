"""Read-side queries for the mini-app: wallet, history, referrals, promo lookup.

Nothing here writes. ``new_customer_hint`` is for display only; discounts
are always re-decided when an order is submitted.
"""

from protean.utils.globals import current_domain

from storefront.catalogue.discount import Discount
from storefront.client.client import Client
from storefront.client.referral import referral_stats
from storefront.errors import NotFoundError
from storefront.order.discounts import DiscountEngine
from storefront.order.order import Order
from storefront.services import order_summary
from storefront.wallet.transaction import BonusTransaction


def client_summary(client_id) -> dict:
    client = current_domain.repository_for(Client).require(client_id)
    return {
        "client_id": str(client.client_id),
        "name": client.name,
        "bonus_balance": client.bonus_balance or 0,
        "lifetime_earned": client.lifetime_earned or 0,
        "completed_orders": client.completed_orders or 0,
        "referrer_id": str(client.referrer_id) if client.referrer_id else None,
        "referral_clicks": client.referral_clicks or 0,
        "new_customer_hint": DiscountEngine().is_new_customer(client.client_id),
    }


def bonus_history(client_id) -> list[dict]:
    return [
        {
            "amount": txn.amount,
            "kind": txn.kind,
            "reason": txn.reason,
            "order_id": str(txn.order_id) if txn.order_id else None,
            "created_at": txn.created_at.isoformat(),
        }
        for txn in current_domain.repository_for(BonusTransaction).history(client_id)
    ]


def order_history(client_id) -> list[dict]:
    return [order_summary(order) for order in current_domain.repository_for(Order).for_client(client_id)]


def order_details(order_id) -> dict:
    return order_summary(current_domain.repository_for(Order).require(order_id))


def referrals(client_id) -> dict:
    return referral_stats(client_id)


def discount_lookup(code: str) -> dict:
    discount = current_domain.repository_for(Discount).find_by_code(code)
    if discount is None:
        raise NotFoundError(f"Promo code {code} does not exist", code=code)
    return {
        "code": discount.code,
        "active": discount.is_active,
        "label": discount.label,
        "description": discount.description,
        "discount_type": discount.discount_type,
        "value": discount.value,
    }
