"""Messenger port: abstract interface for chat message delivery."""

from abc import ABC, abstractmethod


class MessengerPort(ABC):
    """Abstract interface for messenger adapters (chat bot transport)."""

    @abstractmethod
    def send(self, chat_id: str, text: str, actions: list[dict] | None = None) -> dict:
        """Send a text message, optionally with action buttons.

        Each action is ``{"label", "action"}`` (a callback the transport
        echoes back on press) or ``{"label", "url"}``.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
