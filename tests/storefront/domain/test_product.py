"""Domain tests for the Product aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.catalogue.events import ProductRegistered, StockReturned, StockWithdrawn
from storefront.catalogue.product import Product
from storefront.errors import StockError


class TestProductRegistration:
    def test_register_sets_fields(self):
        product = Product.register(name="Oolong", price=750.0, stock=3, product_id="prod-oolong")
        assert product.id == "prod-oolong"
        assert product.price == 750.0
        assert product.stock == 3

    def test_register_raises_event(self):
        product = Product.register(name="Oolong", price=750.0, stock=3)
        assert len(product._events) == 1
        assert isinstance(product._events[0], ProductRegistered)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="Oolong", price=750.0, stock=-1)


class TestStockMovements:
    def test_withdraw_decrements(self):
        product = Product.register(name="Oolong", price=750.0, stock=3)
        product._events.clear()
        product.withdraw(2)
        assert product.stock == 1
        event = product._events[0]
        assert isinstance(event, StockWithdrawn)
        assert event.previous_stock == 3
        assert event.new_stock == 1

    def test_withdraw_last_unit(self):
        product = Product.register(name="Oolong", price=750.0, stock=1)
        product.withdraw(1)
        assert product.stock == 0

    def test_withdraw_more_than_stock_fails(self):
        product = Product.register(name="Oolong", price=750.0, stock=1)
        with pytest.raises(StockError):
            product.withdraw(2)
        assert product.stock == 1

    def test_withdraw_zero_rejected(self):
        product = Product.register(name="Oolong", price=750.0, stock=1)
        with pytest.raises(ValidationError):
            product.withdraw(0)

    def test_replenish_increments(self):
        product = Product.register(name="Oolong", price=750.0, stock=0)
        product._events.clear()
        product.replenish(4)
        assert product.stock == 4
        assert isinstance(product._events[0], StockReturned)

    def test_reprice(self):
        product = Product.register(name="Oolong", price=750.0, stock=0)
        product.reprice(800.0)
        assert product.price == 800.0

    def test_reprice_negative_rejected(self):
        product = Product.register(name="Oolong", price=750.0, stock=0)
        with pytest.raises(ValidationError):
            product.reprice(-1.0)
