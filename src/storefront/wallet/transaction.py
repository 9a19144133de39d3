"""BonusTransaction aggregate: one immutable line in a client's wallet history."""

from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


class TransactionKind(Enum):
    WELCOME_BONUS = "Welcome Bonus"
    CASHBACK = "Cashback"
    INVITE_BONUS = "Invite Bonus"
    REFERRAL_COMMISSION = "Referral Commission"
    REDEMPTION = "Redemption"
    REFUND = "Refund"
    ADJUSTMENT = "Adjustment"


# Kinds that count towards a client's lifetime earnings
EARNING_KINDS = frozenset(
    {
        TransactionKind.WELCOME_BONUS.value,
        TransactionKind.CASHBACK.value,
        TransactionKind.INVITE_BONUS.value,
        TransactionKind.REFERRAL_COMMISSION.value,
    }
)


@storefront.aggregate
class BonusTransaction:
    """Append-only record of a signed balance movement.

    ``related_client_id`` names the friend an invite bonus or commission was
    earned through; ``order_id`` the order that caused the movement.
    """

    client_id: Identifier(required=True)
    amount: Integer(required=True)
    kind: String(choices=TransactionKind, required=True)
    reason: String(required=True, max_length=255)
    order_id: Identifier()
    related_client_id: Identifier()
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def amount_cannot_be_zero(self):
        if self.amount == 0:
            raise ValidationError({"amount": ["A transaction must move a non-zero amount"]})

    @classmethod
    def record(cls, client_id, amount, kind, reason, order_id=None, related_client_id=None):
        return cls(
            client_id=client_id,
            amount=amount,
            kind=kind.value if isinstance(kind, TransactionKind) else kind,
            reason=reason,
            order_id=order_id,
            related_client_id=related_client_id,
            created_at=datetime.now(),
        )


@storefront.repository(part_of=BonusTransaction)
class BonusTransactionRepository:
    def history(self, client_id) -> list[BonusTransaction]:
        """All of the client's transactions, newest first."""
        return self._dao.query.filter(client_id=client_id).order_by("-created_at").limit(None).all().items

    def balance_of(self, client_id) -> int:
        return sum(txn.amount for txn in self.history(client_id))

    def exists(self, client_id, kind: TransactionKind, related_client_id=None) -> bool:
        criteria = {"client_id": client_id, "kind": kind.value}
        if related_client_id is not None:
            criteria["related_client_id"] = related_client_id
        return bool(self._dao.query.filter(**criteria).all().items)
