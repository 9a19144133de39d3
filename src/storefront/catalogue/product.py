"""Product aggregate: authoritative price and stock for an item on sale."""

from datetime import datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, Integer, String

from storefront.catalogue.events import ProductRegistered, ProductRepriced, StockReturned, StockWithdrawn
from storefront.domain import storefront
from storefront.errors import ProductUnavailable, StockError
from storefront.utils.locks import entity_key, entity_locks


@storefront.aggregate
class Product:
    """An item on sale. Stock never goes below zero.

    Stock moves only through ``withdraw`` (an order takes units) and
    ``replenish`` (a cancelled order gives them back, or the shop restocks).
    """

    name: String(required=True, max_length=255)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    registered_at: DateTime(default=datetime.now)

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @classmethod
    def register(cls, name, price, stock=0, product_id=None):
        now = datetime.now()
        kwargs = {"id": product_id} if product_id else {}
        product = cls(name=name, price=price, stock=stock, registered_at=now, **kwargs)
        product.raise_(
            ProductRegistered(
                product_id=product.id,
                name=name,
                price=price,
                stock=stock,
                registered_at=now,
            )
        )
        return product

    def has_stock_for(self, quantity: int) -> bool:
        return self.stock >= quantity

    def withdraw(self, quantity: int) -> None:
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if not self.has_stock_for(quantity):
            raise StockError(
                f"Only {self.stock} of {self.name} left",
                product_id=self.id,
                requested=quantity,
                available=self.stock,
            )

        previous = self.stock
        self.stock = previous - quantity
        self.raise_(
            StockWithdrawn(
                product_id=self.id,
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
            )
        )

    def replenish(self, quantity: int) -> None:
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        previous = self.stock
        self.stock = previous + quantity
        self.raise_(
            StockReturned(
                product_id=self.id,
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
            )
        )

    def reprice(self, new_price: float) -> None:
        if new_price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        previous = self.price
        self.price = new_price
        self.raise_(ProductRepriced(product_id=self.id, previous_price=previous, new_price=new_price))


@storefront.repository(part_of=Product)
class ProductRepository:
    """Product storage with conditional stock updates."""

    def resolve(self, product_id) -> Product:
        """Load a product, translating a miss into ``ProductUnavailable``."""
        try:
            return self.get(product_id)
        except ObjectNotFoundError:
            raise ProductUnavailable(f"Product {product_id} is no longer available", product_id=product_id) from None

    def withdraw_stock(self, product_id, quantity: int) -> bool:
        """Take ``quantity`` units if at least that many are on hand.

        Returns False, leaving the product untouched, when the stock no
        longer covers the request.
        """
        with entity_locks.hold(entity_key("product", product_id)):
            product = self.resolve(product_id)
            if not product.has_stock_for(quantity):
                return False
            product.withdraw(quantity)
            self.add(product)
        return True

    def return_stock(self, product_id, quantity: int) -> Product:
        with entity_locks.hold(entity_key("product", product_id)):
            product = self.resolve(product_id)
            product.replenish(quantity)
            self.add(product)
        return product
