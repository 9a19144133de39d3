"""Notification dispatch: best effort, after the state change has committed.

Delivery problems surface as ``UpstreamNotifyError`` inside this module and
are logged and dropped here; callers only ever see a boolean.
"""

import os

import structlog

from storefront.errors import UpstreamNotifyError
from storefront.notifications.channel import get_messenger
from storefront.notifications.templates import MessageType, get_template

logger = structlog.get_logger(__name__)


def operator_chat_id() -> str | None:
    return os.environ.get("OPERATOR_CHAT_ID")


def _send(chat_id, rendered: dict) -> str:
    try:
        result = get_messenger().send(str(chat_id), rendered["text"], actions=rendered.get("actions"))
    except Exception as exc:
        raise UpstreamNotifyError(str(exc), chat_id=chat_id) from exc

    if result.get("status") != "sent":
        raise UpstreamNotifyError(result.get("error") or "Unknown delivery error", chat_id=chat_id)
    return result.get("message_id")


def deliver(chat_id, message_type: MessageType, context: dict) -> bool:
    """Render and send one message. Returns whether it went out."""
    rendered = get_template(message_type.value).render(context)
    try:
        message_id = _send(chat_id, rendered)
    except UpstreamNotifyError as exc:
        logger.warning(
            "notification_failed",
            chat_id=str(chat_id),
            message_type=message_type.value,
            error=exc.message,
        )
        return False

    logger.info("notification_sent", chat_id=str(chat_id), message_type=message_type.value, message_id=message_id)
    return True


def notify_operator(message_type: MessageType, context: dict) -> bool:
    chat_id = operator_chat_id()
    if not chat_id:
        logger.warning("operator_chat_not_configured", message_type=message_type.value)
        return False
    return deliver(chat_id, message_type, context)


def notify_customer(client_id, message_type: MessageType, context: dict | None = None) -> bool:
    # Web checkouts have no chat to write to
    if str(client_id).startswith("web_"):
        logger.info("notification_skipped", client_id=str(client_id), message_type=message_type.value)
        return False
    return deliver(client_id, message_type, context or {})
