"""Fake messenger adapter: records sent messages for testing."""

from uuid import uuid4

from storefront.notifications.channel.port import MessengerPort


class FakeMessengerAdapter(MessengerPort):
    """Messenger adapter that records messages in memory for test assertions."""

    def __init__(self):
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Messenger delivery failed"
        self.raise_on_send: Exception | None = None

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Messenger delivery failed",
        raise_on_send: Exception | None = None,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_on_send = raise_on_send

    def send(self, chat_id: str, text: str, actions: list[dict] | None = None) -> dict:
        if self.raise_on_send is not None:
            raise self.raise_on_send

        if not self.should_succeed:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"msg-{uuid4().hex[:12]}"
        self.sent_messages.append(
            {
                "message_id": message_id,
                "chat_id": str(chat_id),
                "text": text,
                "actions": actions or [],
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def messages_to(self, chat_id) -> list[dict]:
        return [m for m in self.sent_messages if m["chat_id"] == str(chat_id)]

    def reset(self):
        """Clear sent messages (useful between tests)."""
        self.sent_messages.clear()
        self.should_succeed = True
        self.failure_reason = "Messenger delivery failed"
        self.raise_on_send = None
