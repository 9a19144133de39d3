"""Catalogue management: products and promo codes, commands and handlers."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.discount import Discount, DiscountType
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import NotFoundError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class RegisterProduct:
    product_id: Identifier()
    name: String(required=True, max_length=255)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)


@storefront.command(part_of="Product")
class RestockProduct:
    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class RepriceProduct:
    product_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)


@storefront.command_handler(part_of=Product)
class ProductCommandHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            name=command.name,
            price=command.price,
            stock=command.stock,
            product_id=command.product_id,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_registered", product_id=str(product.id), stock=product.stock)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        product = current_domain.repository_for(Product).return_stock(command.product_id, command.quantity)
        return product.stock

    @handle(RepriceProduct)
    def reprice_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.resolve(command.product_id)
        product.reprice(command.price)
        repo.add(product)


@storefront.command(part_of="Discount")
class RegisterDiscount:
    code: String(required=True, max_length=50)
    discount_type: String(choices=DiscountType, default=DiscountType.PERCENT.value)
    value: Float(required=True, min_value=0.0)
    label: String(max_length=100)
    description: Text()
    is_active: Boolean(default=True)


@storefront.command(part_of="Discount")
class ChangeDiscountStatus:
    code: String(required=True, max_length=50)
    is_active: Boolean(required=True)


@storefront.command_handler(part_of=Discount)
class DiscountCommandHandler:
    @handle(RegisterDiscount)
    def register_discount(self, command):
        repo = current_domain.repository_for(Discount)
        if repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": [f"Discount code {command.code} already exists"]})

        discount = Discount(
            code=command.code,
            discount_type=command.discount_type,
            value=command.value,
            label=command.label,
            description=command.description,
            is_active=command.is_active,
        )
        repo.add(discount)
        return discount.code

    @handle(ChangeDiscountStatus)
    def change_discount_status(self, command):
        repo = current_domain.repository_for(Discount)
        discount = repo.find_by_code(command.code)
        if discount is None:
            raise NotFoundError(f"Discount code {command.code} does not exist", code=command.code)

        if command.is_active:
            discount.activate()
        else:
            discount.deactivate()
        repo.add(discount)
