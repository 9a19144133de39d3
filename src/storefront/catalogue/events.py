"""Domain events for catalogue aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductRegistered:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    registered_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRepriced:
    __version__ = 1

    product_id: Identifier(required=True)
    previous_price: Float(required=True)
    new_price: Float(required=True)


@storefront.event(part_of="Product")
class StockWithdrawn:
    """Units left the shelf for an order."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)


@storefront.event(part_of="Product")
class StockReturned:
    """Units came back to the shelf (cancellation or restock)."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
