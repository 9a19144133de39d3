"""Order aggregate: a frozen snapshot of what the client bought and at what price.

State Machine:
    NEW → COMPLETED   (operator confirms hand-over)
    NEW → CANCELLED   (operator cancels)

Both targets are terminal. Repeating a transition that already happened is
a no-op for the caller; moving between the two terminal states is an error.
"""

import json
from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.errors import NotFoundError, TransitionError
from storefront.order.events import OrderCancelled, OrderCompleted, OrderPlaced
from storefront.utils.locks import entity_key, entity_locks


class OrderStatus(Enum):
    NEW = "New"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class TransitionOutcome(Enum):
    """What a Confirm/Cancel request did."""

    OK = "ok"
    ALREADY_DONE = "already-done"


_VALID_TRANSITIONS = {
    OrderStatus.NEW: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderPricing:
    """Money breakdown of an order, locked at submission.

    Discounts and bonus spend are whole units; ``total`` is what the client
    pays out of band.
    """

    subtotal = Float(default=0.0)
    new_customer_discount = Integer(default=0)
    promo_discount = Integer(default=0)
    promo_code = String(max_length=50)
    bonuses_used = Integer(default=0)
    total = Float(default=0.0)

    @property
    def discount_total(self) -> int:
        return (self.new_customer_discount or 0) + (self.promo_discount or 0) + (self.bonuses_used or 0)


@storefront.value_object(part_of="Order")
class DeliveryDetails:
    """Where and how the client wants the order; free text from the checkout form."""

    recipient = String(max_length=255)
    phone = String(max_length=30)
    address = Text()
    payment_method = String(max_length=50)
    comment = Text()
    username = String(max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line as it was at submission; later catalogue edits don't touch it."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    client_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.NEW.value)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    delivery = ValueObject(DeliveryDetails)
    created_at = DateTime(default=datetime.now)
    completed_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def total_cannot_be_negative(self):
        if self.pricing is not None and self.pricing.total < 0:
            raise ValidationError({"total": ["Order total cannot be negative"]})

    @classmethod
    def place(cls, client_id, items, pricing: OrderPricing, delivery: DeliveryDetails | None = None):
        """Create a New order from already validated ``(product_id, name, unit_price, quantity)`` lines."""
        if not items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now()
        order = cls(
            client_id=client_id,
            items=[
                OrderItem(
                    product_id=item["product_id"],
                    name=item["name"],
                    unit_price=item["unit_price"],
                    quantity=item["quantity"],
                )
                for item in items
            ],
            pricing=pricing,
            delivery=delivery,
            created_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                client_id=client_id,
                items=json.dumps(items),
                subtotal=pricing.subtotal,
                discount_total=pricing.discount_total,
                promo_code=pricing.promo_code,
                bonuses_used=pricing.bonuses_used,
                total=pricing.total,
                placed_at=now,
            )
        )
        return order

    def is_in(self, status: OrderStatus) -> bool:
        return self.status == status.value

    def complete(self) -> None:
        self._assert_can_transition(OrderStatus.COMPLETED)
        now = datetime.now()
        self.status = OrderStatus.COMPLETED.value
        self.completed_at = now
        self.raise_(
            OrderCompleted(
                order_id=self.id,
                client_id=self.client_id,
                total=self.pricing.total,
                completed_at=now,
            )
        )

    def cancel(self) -> None:
        self._assert_can_transition(OrderStatus.CANCELLED)
        now = datetime.now()
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_at = now
        self.raise_(
            OrderCancelled(
                order_id=self.id,
                client_id=self.client_id,
                bonuses_refunded=self.pricing.bonuses_used,
                cancelled_at=now,
            )
        )

    def transition_to(self, target: OrderStatus) -> None:
        if target == OrderStatus.COMPLETED:
            self.complete()
        elif target == OrderStatus.CANCELLED:
            self.cancel()
        else:
            self._assert_can_transition(target)

    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise TransitionError(
                f"Order {self.id} is {current.value} and cannot become {target_status.value}",
                order_id=self.id,
                current=current.value,
                target=target_status.value,
            )


@storefront.repository(part_of=Order)
class OrderRepository:
    def require(self, order_id) -> Order:
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise NotFoundError(f"Order {order_id} does not exist", order_id=order_id) from None

    def claim(self, order_id, target: OrderStatus) -> Order | None:
        """Check-and-set the order's status.

        Returns the transitioned order, or None when it already is in
        ``target`` (a repeated delivery). Raises ``TransitionError`` when the
        order sits in the other terminal state.
        """
        with entity_locks.hold(entity_key("order", order_id)):
            order = self.require(order_id)
            if order.is_in(target):
                return None
            order.transition_to(target)
            self.add(order)
        return order

    def for_client(self, client_id) -> list[Order]:
        """The client's orders, newest first."""
        return self._dao.query.filter(client_id=client_id).order_by("-created_at").limit(None).all().items

    def live_for_client(self, client_id) -> list[Order]:
        """Every order of the client that was not cancelled."""
        return (
            self._dao.query.filter(client_id=client_id)
            .exclude(status=OrderStatus.CANCELLED.value)
            .limit(None)
            .all()
            .items
        )

    def placed_since(self, client_id, since: datetime) -> bool:
        return any(order.created_at >= since for order in self.live_for_client(client_id))
