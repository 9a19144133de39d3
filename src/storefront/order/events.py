"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A validated order was accepted and is waiting for the operator."""

    __version__ = 1

    order_id: Identifier(required=True)
    client_id: Identifier(required=True)
    items: Text(required=True)  # JSON list of frozen line snapshots
    subtotal: Float(required=True)
    discount_total: Float(required=True)
    promo_code: String()
    bonuses_used: Integer(default=0)
    total: Float(required=True)
    placed_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCompleted:
    """The operator handed the order over; rewards were paid out."""

    __version__ = 1

    order_id: Identifier(required=True)
    client_id: Identifier(required=True)
    total: Float(required=True)
    completed_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The operator cancelled the order; stock and redeemed points went back."""

    __version__ = 1

    order_id: Identifier(required=True)
    client_id: Identifier(required=True)
    bonuses_refunded: Integer(default=0)
    cancelled_at: DateTime(required=True)
