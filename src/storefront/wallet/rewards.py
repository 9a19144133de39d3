"""Loyalty rewards paid out when an order completes.

Nothing is paid at order creation: cashback, welcome and referral bonuses
are granted only against completed orders, which can no longer be
cancelled.
"""

from dataclasses import dataclass

from storefront.shared.points import percent_of
from storefront.wallet.transaction import TransactionKind

WELCOME_BONUS = 100
INVITE_BONUS = 100
CASHBACK_PERCENT = 2
REFERRAL_COMMISSION_PERCENT = 1


@dataclass
class CompletionRewards:
    welcome_bonus: int = 0
    cashback: int = 0
    invite_bonus: int = 0
    commission: int = 0
    referrer_id: str | None = None


def grant_completion_rewards(ledger, client, order, referrer=None) -> CompletionRewards:
    """Credit everything a completed ``order`` earns.

    ``client.completed_orders`` must already include this order. One-off
    bonuses are guarded by the ledger history, not by counters, so a retried
    completion cannot pay them twice.
    """
    rewards = CompletionRewards()
    first_order = client.completed_orders == 1
    total = order.pricing.total

    if first_order and not ledger.has_received(client, TransactionKind.WELCOME_BONUS):
        ledger.credit(client, WELCOME_BONUS, "Welcome Bonus", kind=TransactionKind.WELCOME_BONUS, order_id=order.id)
        rewards.welcome_bonus = WELCOME_BONUS

    rewards.cashback = percent_of(total, CASHBACK_PERCENT)
    ledger.credit(
        client,
        rewards.cashback,
        f"Cashback for order #{order.id}",
        kind=TransactionKind.CASHBACK,
        order_id=order.id,
    )

    if referrer is None:
        return rewards

    rewards.referrer_id = str(referrer.client_id)
    if first_order and not ledger.has_received(
        referrer, TransactionKind.INVITE_BONUS, related_client_id=client.client_id
    ):
        ledger.credit(
            referrer,
            INVITE_BONUS,
            f"Invite bonus (friend: {client.client_id})",
            kind=TransactionKind.INVITE_BONUS,
            order_id=order.id,
            related_client_id=client.client_id,
        )
        rewards.invite_bonus = INVITE_BONUS

    rewards.commission = percent_of(total, REFERRAL_COMMISSION_PERCENT)
    ledger.credit(
        referrer,
        rewards.commission,
        f"Referral commission for order #{order.id}",
        kind=TransactionKind.REFERRAL_COMMISSION,
        order_id=order.id,
        related_client_id=client.client_id,
    )
    return rewards
