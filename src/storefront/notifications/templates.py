"""Message templates: one class per message type, each rendering text and actions."""

from enum import Enum


class MessageType(Enum):
    NEW_ORDER = "NewOrder"
    ORDER_ACCEPTED = "OrderAccepted"
    ORDER_COMPLETED = "OrderCompleted"
    ORDER_CANCELLED = "OrderCancelled"
    INVITE_BONUS = "InviteBonus"
    WELCOME = "Welcome"


def _money(amount) -> str:
    return f"{amount:g}"


def contact_action(client_id, username=None) -> dict:
    """Button that opens a chat with the customer."""
    if username:
        return {"label": "Contact customer", "url": f"https://t.me/{username.lstrip('@')}"}
    return {"label": "Contact customer", "url": f"tg://user?id={client_id}"}


class NewOrderTemplate:
    """Operator summary with Confirm / Cancel actions."""

    message_type = MessageType.NEW_ORDER.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context["order_id"]
        delivery = context.get("delivery") or {}
        pricing = context.get("pricing") or {}

        lines = [f"NEW ORDER #{order_id}", ""]
        lines.append(f"Customer: {delivery.get('recipient') or context.get('client_name', 'Guest')}")
        if delivery.get("username"):
            lines.append(f"Username: @{delivery['username'].lstrip('@')}")
        if delivery.get("phone"):
            lines.append(f"Phone: {delivery['phone']}")
        if delivery.get("address"):
            lines.append(f"Address: {delivery['address']}")
        if delivery.get("payment_method"):
            lines.append(f"Payment: {delivery['payment_method']}")
        if delivery.get("comment"):
            lines.append(f"Comment: {delivery['comment']}")

        lines += ["", "Items:"]
        for item in context.get("items", []):
            line_total = item["unit_price"] * item["quantity"]
            lines.append(f"- {item['name']} x{item['quantity']} = {_money(line_total)}")

        lines += ["", f"Subtotal: {_money(pricing.get('subtotal', 0))}"]
        if pricing.get("new_customer_discount"):
            lines.append(f"New customer discount: -{pricing['new_customer_discount']}")
        if pricing.get("promo_discount"):
            lines.append(f"Promo {pricing.get('promo_code')}: -{pricing['promo_discount']}")
        if pricing.get("bonuses_used"):
            lines.append(f"Bonus points: -{pricing['bonuses_used']}")
        lines.append(f"TOTAL: {_money(pricing.get('total', 0))}")

        return {
            "text": "\n".join(lines),
            "actions": [
                {"label": "Confirm (handed over)", "action": f"confirm_{order_id}"},
                {"label": "Cancel", "action": f"cancel_{order_id}"},
                contact_action(context["client_id"], delivery.get("username")),
            ],
        }


class OrderAcceptedTemplate:
    message_type = MessageType.ORDER_ACCEPTED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "text": (
                f"Your order #{context['order_id']} has been placed.\n"
                f"Total to pay: {_money(context['total'])}\n"
                "We will contact you shortly."
            ),
            "actions": [],
        }


class OrderCompletedTemplate:
    message_type = MessageType.ORDER_COMPLETED.value

    @staticmethod
    def render(context: dict) -> dict:
        text = f"Your order #{context['order_id']} has been handed over. Thank you!"
        if context.get("cashback"):
            text += f"\nCashback credited: +{context['cashback']} points."
        if context.get("welcome_bonus"):
            text += f"\nWelcome bonus credited: +{context['welcome_bonus']} points."
        return {"text": text, "actions": []}


class OrderCancelledTemplate:
    message_type = MessageType.ORDER_CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        text = f"Your order #{context['order_id']} has been cancelled."
        if context.get("bonuses_refunded"):
            text += f"\n{context['bonuses_refunded']} bonus points were returned to your balance."
        return {"text": text, "actions": []}


class InviteBonusTemplate:
    message_type = MessageType.INVITE_BONUS.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "text": (
                f"Your friend completed their first order! +{context['invite_bonus']} points for the invite."
            ),
            "actions": [],
        }


class WelcomeTemplate:
    message_type = MessageType.WELCOME.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "text": (
                "Welcome to the shop!\n"
                "Earn cashback on every order and invite friends to collect bonus points."
            ),
            "actions": [],
        }


TEMPLATE_REGISTRY: dict[str, type] = {
    template.message_type: template
    for template in (
        NewOrderTemplate,
        OrderAcceptedTemplate,
        OrderCompletedTemplate,
        OrderCancelledTemplate,
        InviteBonusTemplate,
        WelcomeTemplate,
    )
}


def get_template(message_type: str):
    """Look up a template class by message type string."""
    template_cls = TEMPLATE_REGISTRY.get(message_type)
    if template_cls is None:
        raise ValueError(f"No template registered for message type: {message_type}")
    return template_cls
