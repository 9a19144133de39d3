"""Messenger adapter registry.

Uses the fake adapter by default; the real chat transport lives outside
this service and plugs in through ``MessengerPort`` selected by the
``MESSENGER_ADAPTER`` environment variable.
"""

import os

_messenger_instance = None


def get_messenger():
    """Return the configured messenger adapter (singleton)."""
    global _messenger_instance
    if _messenger_instance is None:
        adapter = os.environ.get("MESSENGER_ADAPTER", "fake")
        if adapter == "fake":
            from storefront.notifications.channel.fake_messenger import FakeMessengerAdapter

            _messenger_instance = FakeMessengerAdapter()
        else:
            raise ValueError(f"Unknown messenger adapter: {adapter}")
    return _messenger_instance


def reset_messenger():
    """Reset the messenger singleton (useful for testing)."""
    global _messenger_instance
    _messenger_instance = None
