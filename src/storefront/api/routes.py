"""FastAPI routes for the Storefront: orders, clients, catalogue."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront import queries, services
from storefront.api.schemas import (
    AttachReferralRequest,
    AttachReferralResponse,
    BonusTransactionResponse,
    ClientSummaryResponse,
    DiscountCodeResponse,
    DiscountResponse,
    ProductIdResponse,
    ReferralStatsResponse,
    RegisterDiscountRequest,
    RegisterProductRequest,
    RegisterVisitRequest,
    RegisterVisitResponse,
    RestockRequest,
    StockResponse,
    SubmitOrderRequest,
    SubmitOrderResponse,
    TransitionResponse,
)
from storefront.catalogue.management import RegisterDiscount, RegisterProduct, RestockProduct
from storefront.catalogue.product import Product

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=SubmitOrderResponse)
async def submit_order(body: SubmitOrderRequest) -> SubmitOrderResponse:
    result = services.submit_order(
        client_id=body.client_id,
        items=[item.model_dump(exclude_none=True) for item in body.items],
        requested_total=body.requested_total,
        bonus_points=body.bonus_points,
        promo_code=body.promo_code,
        delivery=body.delivery.model_dump(exclude_none=True) if body.delivery else None,
    )
    return SubmitOrderResponse(**result)


@order_router.put("/{order_id}/confirm", response_model=TransitionResponse)
async def confirm_order(order_id: str) -> TransitionResponse:
    return TransitionResponse(**services.confirm_order(order_id))


@order_router.put("/{order_id}/cancel", response_model=TransitionResponse)
async def cancel_order(order_id: str) -> TransitionResponse:
    return TransitionResponse(**services.cancel_order(order_id))


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    return queries.order_details(order_id)


# ---------------------------------------------------------------------------
# Client Router
# ---------------------------------------------------------------------------
client_router = APIRouter(prefix="/clients", tags=["clients"])


@client_router.post("/visit", response_model=RegisterVisitResponse)
async def register_visit(body: RegisterVisitRequest) -> RegisterVisitResponse:
    result = services.register_visit(body.client_id, name=body.name, username=body.username)
    return RegisterVisitResponse(**result)


@client_router.post("/{client_id}/referral", response_model=AttachReferralResponse)
async def attach_referral(client_id: str, body: AttachReferralRequest) -> AttachReferralResponse:
    return AttachReferralResponse(**services.attach_referral(client_id, body.referrer_id))


@client_router.get("/{client_id}", response_model=ClientSummaryResponse)
async def get_client(client_id: str) -> ClientSummaryResponse:
    return ClientSummaryResponse(**queries.client_summary(client_id))


@client_router.get("/{client_id}/transactions", response_model=list[BonusTransactionResponse])
async def get_bonus_history(client_id: str) -> list[BonusTransactionResponse]:
    return [BonusTransactionResponse(**txn) for txn in queries.bonus_history(client_id)]


@client_router.get("/{client_id}/orders")
async def get_order_history(client_id: str) -> list[dict]:
    return queries.order_history(client_id)


@client_router.get("/{client_id}/referrals", response_model=ReferralStatsResponse)
async def get_referral_stats(client_id: str) -> ReferralStatsResponse:
    return ReferralStatsResponse(**queries.referrals(client_id))


# ---------------------------------------------------------------------------
# Catalogue Routers
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])
discount_router = APIRouter(prefix="/discounts", tags=["discounts"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(
        product_id=body.product_id,
        name=body.name,
        price=body.price,
        stock=body.stock,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}/stock", response_model=StockResponse)
async def restock_product(product_id: str, body: RestockRequest) -> StockResponse:
    result = current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StockResponse(product_id=product_id, stock=result)


@product_router.get("/{product_id}", response_model=StockResponse)
async def get_product_stock(product_id: str) -> StockResponse:
    product = current_domain.repository_for(Product).resolve(product_id)
    return StockResponse(product_id=product_id, stock=product.stock)


@discount_router.post("", status_code=201, response_model=DiscountCodeResponse)
async def register_discount(body: RegisterDiscountRequest) -> DiscountCodeResponse:
    command = RegisterDiscount(
        code=body.code,
        discount_type=body.discount_type,
        value=body.value,
        label=body.label,
        description=body.description,
        is_active=body.is_active,
    )
    result = current_domain.process(command, asynchronous=False)
    return DiscountCodeResponse(code=result)


@discount_router.get("/{code}", response_model=DiscountResponse)
async def get_discount(code: str) -> DiscountResponse:
    return DiscountResponse(**queries.discount_lookup(code))
