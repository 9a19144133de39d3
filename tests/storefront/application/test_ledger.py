"""Application tests for the wallet ledger."""

import pytest
from protean import current_domain
from storefront.client.client import Client
from storefront.errors import InsufficientBalance
from storefront.wallet.ledger import Ledger
from storefront.wallet.transaction import BonusTransaction, TransactionKind


@pytest.fixture()
def client():
    clients = current_domain.repository_for(Client)
    client, _ = clients.ensure("client-001")
    return client


@pytest.fixture()
def transactions():
    return current_domain.repository_for(BonusTransaction)


class TestLedger:
    def test_credit_records_transaction(self, client, transactions):
        Ledger().credit(client, 150, "Cashback for order #1", kind=TransactionKind.CASHBACK)

        stored = current_domain.repository_for(Client).get("client-001")
        assert stored.bonus_balance == 150
        history = transactions.history("client-001")
        assert len(history) == 1
        assert history[0].amount == 150
        assert history[0].kind == TransactionKind.CASHBACK.value

    def test_debit_records_negative_amount(self, client, transactions):
        ledger = Ledger()
        ledger.credit(client, 300, "Opening balance")
        ledger.debit(client, 120, "Payment for order #1")

        assert current_domain.repository_for(Client).get("client-001").bonus_balance == 180
        amounts = sorted(t.amount for t in transactions.history("client-001"))
        assert amounts == [-120, 300]

    def test_debit_beyond_balance(self, client, transactions):
        ledger = Ledger()
        ledger.credit(client, 50, "Opening balance")

        with pytest.raises(InsufficientBalance):
            ledger.debit(client, 51, "Payment for order #1")

        assert len(transactions.history("client-001")) == 1

    def test_zero_amount_records_nothing(self, client, transactions):
        assert Ledger().credit(client, 0, "Cashback for order #1", kind=TransactionKind.CASHBACK) is None
        assert transactions.history("client-001") == []

    def test_balance_equals_sum_of_transactions(self, client, transactions):
        ledger = Ledger()
        ledger.credit(client, 100, "Welcome Bonus", kind=TransactionKind.WELCOME_BONUS)
        ledger.credit(client, 37, "Cashback", kind=TransactionKind.CASHBACK)
        ledger.debit(client, 90, "Payment")
        ledger.credit(client, 90, "Refund", kind=TransactionKind.REFUND)
        ledger.debit(client, 12, "Payment")

        stored = current_domain.repository_for(Client).get("client-001")
        assert stored.bonus_balance == transactions.balance_of("client-001") == 125

    def test_lifetime_earned_counts_earnings_only(self, client):
        ledger = Ledger()
        ledger.credit(client, 100, "Welcome Bonus", kind=TransactionKind.WELCOME_BONUS)
        ledger.credit(client, 40, "Commission", kind=TransactionKind.REFERRAL_COMMISSION)
        ledger.credit(client, 70, "Refund", kind=TransactionKind.REFUND)
        ledger.credit(client, 5, "Goodwill", kind=TransactionKind.ADJUSTMENT)
        ledger.debit(client, 30, "Payment")

        stored = current_domain.repository_for(Client).get("client-001")
        assert stored.lifetime_earned == 140
        assert stored.bonus_balance == 185

    def test_has_received(self, client):
        ledger = Ledger()
        assert ledger.has_received(client, TransactionKind.WELCOME_BONUS) is False
        ledger.credit(client, 100, "Welcome Bonus", kind=TransactionKind.WELCOME_BONUS)
        assert ledger.has_received(client, TransactionKind.WELCOME_BONUS) is True

    def test_has_received_for_related_client(self, client):
        ledger = Ledger()
        ledger.credit(
            client, 100, "Invite bonus", kind=TransactionKind.INVITE_BONUS, related_client_id="friend-1"
        )
        assert ledger.has_received(client, TransactionKind.INVITE_BONUS, related_client_id="friend-1")
        assert not ledger.has_received(client, TransactionKind.INVITE_BONUS, related_client_id="friend-2")

    def test_long_history_still_sums_to_balance(self, client, transactions):
        ledger = Ledger()
        for _ in range(120):
            ledger.credit(client, 5, "Cashback", kind=TransactionKind.CASHBACK)

        stored = current_domain.repository_for(Client).get("client-001")
        assert len(transactions.history("client-001")) == 120
        assert stored.bonus_balance == transactions.balance_of("client-001") == 600
