"""Client aggregate: a customer known to the shop, with wallet balance and referral edge."""

from datetime import datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from storefront.client.events import ClientRegistered, PointsCredited, PointsDebited, ReferrerAttached
from storefront.domain import storefront
from storefront.errors import InsufficientBalance, NotFoundError
from storefront.utils.locks import entity_key, entity_locks

GUEST_NAME = "Guest"
PLACEHOLDER_REFERRER_NAME = "Referrer (auto)"


@storefront.aggregate
class Client:
    """A customer, identified by their messenger id (or ``web_*`` for web checkouts).

    Balance fields change only through the wallet ledger, which records a
    transaction for every movement. The referrer can be replaced freely
    until the first order completes, then it is frozen.
    """

    client_id: Identifier(identifier=True, required=True)
    name: String(max_length=255, default=GUEST_NAME)
    username: String(max_length=100)
    phone: String(max_length=30)
    bonus_balance: Integer(default=0, min_value=0)
    lifetime_earned: Integer(default=0)
    completed_orders: Integer(default=0)
    referrer_id: Identifier()
    referral_clicks: Integer(default=0)
    registered_at: DateTime(default=datetime.now)

    @invariant.post
    def balance_cannot_be_negative(self):
        if self.bonus_balance is not None and self.bonus_balance < 0:
            raise ValidationError({"bonus_balance": ["Bonus balance cannot be negative"]})

    @invariant.post
    def cannot_refer_self(self):
        if self.referrer_id is not None and self.referrer_id == self.client_id:
            raise ValidationError({"referrer_id": ["A client cannot refer themselves"]})

    @classmethod
    def register(cls, client_id, name=None):
        now = datetime.now()
        client = cls(client_id=client_id, name=name or GUEST_NAME, registered_at=now)
        client.raise_(ClientRegistered(client_id=client.client_id, name=client.name, registered_at=now))
        return client

    @property
    def referral_locked(self) -> bool:
        """Attribution is frozen once an order has completed."""
        return self.completed_orders > 0

    @property
    def is_web_client(self) -> bool:
        return str(self.client_id).startswith("web_")

    def attach_referrer(self, referrer_id) -> bool:
        """Point the client at ``referrer_id``; the last attribution before the first purchase wins."""
        if str(referrer_id) == str(self.client_id) or self.referral_locked:
            return False

        previous = self.referrer_id
        self.referrer_id = referrer_id
        if previous != referrer_id:
            self.raise_(
                ReferrerAttached(
                    client_id=self.client_id,
                    referrer_id=referrer_id,
                    previous_referrer_id=previous,
                )
            )
        return True

    def record_referral_click(self) -> None:
        self.referral_clicks += 1

    def record_completed_order(self) -> None:
        self.completed_orders += 1

    def update_contact(self, name=None, username=None, phone=None) -> None:
        if name:
            self.name = name
        if username:
            self.username = username
        if phone:
            self.phone = phone

    def credit_points(self, amount: int, reason: str, earned: bool = False) -> None:
        if amount <= 0:
            raise ValidationError({"amount": ["Credit amount must be positive"]})

        self.bonus_balance += amount
        if earned:
            self.lifetime_earned += amount
        self.raise_(
            PointsCredited(
                client_id=self.client_id,
                amount=amount,
                reason=reason,
                new_balance=self.bonus_balance,
            )
        )

    def debit_points(self, amount: int, reason: str) -> None:
        if amount <= 0:
            raise ValidationError({"amount": ["Debit amount must be positive"]})
        if amount > self.bonus_balance:
            raise InsufficientBalance(
                f"Not enough bonus points: {self.bonus_balance} available, {amount} requested",
                client_id=self.client_id,
                balance=self.bonus_balance,
                requested=amount,
            )

        self.bonus_balance -= amount
        self.raise_(
            PointsDebited(
                client_id=self.client_id,
                amount=amount,
                reason=reason,
                new_balance=self.bonus_balance,
            )
        )


@storefront.repository(part_of=Client)
class ClientRepository:
    def find(self, client_id) -> Client | None:
        try:
            return self.get(client_id)
        except ObjectNotFoundError:
            return None

    def require(self, client_id) -> Client:
        client = self.find(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} does not exist", client_id=client_id)
        return client

    def ensure(self, client_id, name=None) -> tuple[Client, bool]:
        """Return the client, creating it on first touch. The flag tells whether it was created."""
        with entity_locks.hold(entity_key("client", client_id)):
            client = self.find(client_id)
            if client is not None:
                return client, False

            client = Client.register(client_id, name=name)
            self.add(client)
            return client, True

    def referred_by(self, referrer_id) -> list[Client]:
        return self._dao.query.filter(referrer_id=referrer_id).limit(None).all().items
