"""Wallet ledger: the only way bonus balances change.

Every credit or debit updates the client's balance and appends a
``BonusTransaction`` in the same unit of work, so a client's balance
always equals the sum of its transactions.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.client.client import Client
from storefront.utils.locks import entity_key, entity_locks
from storefront.wallet.transaction import EARNING_KINDS, BonusTransaction, TransactionKind

logger = structlog.get_logger(__name__)


class Ledger:
    """Credits and debits bonus points on loaded ``Client`` aggregates.

    Callers pass the aggregate they already hold so that every change in a
    command lands on the same object; the ledger persists it.
    """

    def __init__(self):
        self.clients = current_domain.repository_for(Client)
        self.transactions = current_domain.repository_for(BonusTransaction)

    def credit(
        self,
        client: Client,
        amount: int,
        reason: str,
        kind: TransactionKind = TransactionKind.ADJUSTMENT,
        order_id=None,
        related_client_id=None,
    ) -> BonusTransaction | None:
        """Add ``amount`` points. A zero amount (e.g. cashback on a tiny order) records nothing."""
        if amount == 0:
            return None

        with entity_locks.hold(entity_key("client", client.client_id)):
            client.credit_points(amount, reason, earned=kind.value in EARNING_KINDS)
            txn = BonusTransaction.record(
                client.client_id,
                amount,
                kind,
                reason,
                order_id=order_id,
                related_client_id=related_client_id,
            )
            self.clients.add(client)
            self.transactions.add(txn)

        logger.info(
            "bonus_credited",
            client_id=str(client.client_id),
            amount=amount,
            kind=kind.value,
            balance=client.bonus_balance,
        )
        return txn

    def debit(
        self,
        client: Client,
        amount: int,
        reason: str,
        kind: TransactionKind = TransactionKind.REDEMPTION,
        order_id=None,
    ) -> BonusTransaction | None:
        """Take ``amount`` points; raises ``InsufficientBalance`` when the balance does not cover it."""
        if amount == 0:
            return None

        with entity_locks.hold(entity_key("client", client.client_id)):
            client.debit_points(amount, reason)
            txn = BonusTransaction.record(client.client_id, -amount, kind, reason, order_id=order_id)
            self.clients.add(client)
            self.transactions.add(txn)

        logger.info(
            "bonus_debited",
            client_id=str(client.client_id),
            amount=amount,
            kind=kind.value,
            balance=client.bonus_balance,
        )
        return txn

    def has_received(self, client: Client, kind: TransactionKind, related_client_id=None) -> bool:
        return self.transactions.exists(client.client_id, kind, related_client_id=related_client_id)
