"""Application services: the storefront's inbound operations.

Each operation holds the write keys of every record it touches, processes
its command synchronously (one unit of work), and only after that commit
talks to the messenger. A failed notification never undoes the change.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.client.client import Client
from storefront.client.referral import AttachReferral
from storefront.client.visit import RegisterVisit
from storefront.notifications.dispatch import notify_customer, notify_operator
from storefront.notifications.templates import MessageType
from storefront.order.cancellation import CancelOrder
from storefront.order.confirmation import ConfirmOrder
from storefront.order.order import Order, TransitionOutcome
from storefront.order.submission import SubmitOrder
from storefront.utils.locks import entity_key, entity_locks

logger = structlog.get_logger(__name__)


def order_summary(order: Order) -> dict:
    """Template context describing ``order``."""
    pricing = order.pricing
    delivery = order.delivery
    return {
        "order_id": str(order.id),
        "client_id": str(order.client_id),
        "status": order.status,
        "items": [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "unit_price": item.unit_price,
                "quantity": item.quantity,
            }
            for item in order.items
        ],
        "pricing": {
            "subtotal": pricing.subtotal,
            "new_customer_discount": pricing.new_customer_discount,
            "promo_discount": pricing.promo_discount,
            "promo_code": pricing.promo_code,
            "bonuses_used": pricing.bonuses_used,
            "total": pricing.total,
        },
        "delivery": (
            {
                "recipient": delivery.recipient,
                "phone": delivery.phone,
                "address": delivery.address,
                "payment_method": delivery.payment_method,
                "comment": delivery.comment,
                "username": delivery.username,
            }
            if delivery
            else {}
        ),
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


def _order_keys(order_id) -> list[str]:
    """Write keys for everything a Confirm/Cancel of ``order_id`` may touch."""
    keys = [entity_key("order", order_id)]
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        return keys

    keys.append(entity_key("client", order.client_id))
    keys.extend(entity_key("product", item.product_id) for item in order.items)
    client = current_domain.repository_for(Client).find(order.client_id)
    if client is not None and client.referrer_id:
        keys.append(entity_key("client", client.referrer_id))
    return keys


def submit_order(
    client_id,
    items: list[dict],
    requested_total: float,
    bonus_points: int = 0,
    promo_code: str | None = None,
    delivery: dict | None = None,
) -> dict:
    """Validate and place an order, then tell the operator and the customer."""
    product_keys = [entity_key("product", item.get("product_id")) for item in items if isinstance(item, dict)]
    with entity_locks.hold(entity_key("client", client_id), *product_keys):
        result = current_domain.process(
            SubmitOrder(
                client_id=client_id,
                items=json.dumps(items),
                requested_total=requested_total,
                bonus_points=bonus_points,
                promo_code=promo_code or None,
                delivery=json.dumps(delivery) if delivery else None,
            ),
            asynchronous=False,
        )

    order = current_domain.repository_for(Order).get(result["order_id"])
    notify_operator(MessageType.NEW_ORDER, order_summary(order))
    notify_customer(client_id, MessageType.ORDER_ACCEPTED, result)
    return result


def confirm_order(order_id) -> dict:
    with entity_locks.hold(*_order_keys(order_id)):
        result = current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)

    if result["status"] == TransitionOutcome.OK.value:
        notify_customer(result["client_id"], MessageType.ORDER_COMPLETED, result)
        if result["invite_bonus"]:
            notify_customer(result["referrer_id"], MessageType.INVITE_BONUS, result)
    return {"status": result["status"], "order_id": result["order_id"]}


def cancel_order(order_id) -> dict:
    with entity_locks.hold(*_order_keys(order_id)):
        result = current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)

    if result["status"] == TransitionOutcome.OK.value:
        notify_customer(result["client_id"], MessageType.ORDER_CANCELLED, result)
    return {"status": result["status"], "order_id": result["order_id"]}


def attach_referral(client_id, referrer_id) -> dict:
    with entity_locks.hold(entity_key("client", client_id), entity_key("client", referrer_id)):
        return current_domain.process(
            AttachReferral(client_id=client_id, referrer_id=referrer_id),
            asynchronous=False,
        )


def register_visit(client_id, name=None, username=None) -> dict:
    with entity_locks.hold(entity_key("client", client_id)):
        result = current_domain.process(
            RegisterVisit(client_id=client_id, name=name, username=username),
            asynchronous=False,
        )

    if result["is_new"]:
        notify_customer(client_id, MessageType.WELCOME)
    return result
