"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer): request bodies are
strict, unknown fields are rejected before any command is built.
"""

from pydantic import BaseModel, Field

_STRICT = {"extra": "forbid"}


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderLineSchema(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    unit_price: float | None = Field(default=None, ge=0)  # as displayed; ignored for pricing

    model_config = _STRICT


class DeliveryDetailsSchema(BaseModel):
    recipient: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = None
    payment_method: str | None = Field(default=None, max_length=50)
    comment: str | None = None
    username: str | None = Field(default=None, max_length=100)

    model_config = _STRICT


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class SubmitOrderRequest(BaseModel):
    client_id: str = Field(min_length=1)
    items: list[OrderLineSchema] = Field(min_length=1)
    requested_total: float = Field(ge=0)
    bonus_points: int = Field(default=0, ge=0)
    promo_code: str | None = Field(default=None, max_length=50)
    delivery: DeliveryDetailsSchema | None = None

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "examples": [
                {
                    "client_id": "123456789",
                    "items": [{"product_id": "prod-001", "quantity": 2, "unit_price": 450.0}],
                    "requested_total": 810.0,
                    "bonus_points": 0,
                    "promo_code": "new_client_10",
                    "delivery": {
                        "recipient": "Anna",
                        "phone": "+10000000000",
                        "address": "1 Main St",
                        "payment_method": "cash",
                    },
                }
            ]
        },
    }


# ---------------------------------------------------------------------------
# Client Request Schemas
# ---------------------------------------------------------------------------
class RegisterVisitRequest(BaseModel):
    client_id: str = Field(min_length=1)
    name: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, max_length=100)

    model_config = _STRICT


class AttachReferralRequest(BaseModel):
    referrer_id: str = Field(min_length=1)

    model_config = _STRICT


# ---------------------------------------------------------------------------
# Catalogue Request Schemas
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    product_id: str | None = None
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)

    model_config = _STRICT


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)

    model_config = _STRICT


class RegisterDiscountRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    discount_type: str = Field(default="percent", pattern="^(percent|fixed)$")
    value: float = Field(ge=0)
    label: str | None = Field(default=None, max_length=100)
    description: str | None = None
    is_active: bool = True

    model_config = _STRICT


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class SubmitOrderResponse(BaseModel):
    order_id: str
    total: float


class TransitionResponse(BaseModel):
    status: str
    order_id: str


class AttachReferralResponse(BaseModel):
    attached: bool


class RegisterVisitResponse(BaseModel):
    is_new: bool


class ProductIdResponse(BaseModel):
    product_id: str


class DiscountCodeResponse(BaseModel):
    code: str


class StockResponse(BaseModel):
    product_id: str
    stock: int


class ClientSummaryResponse(BaseModel):
    client_id: str
    name: str | None = None
    bonus_balance: int = 0
    lifetime_earned: int = 0
    completed_orders: int = 0
    referrer_id: str | None = None
    referral_clicks: int = 0
    new_customer_hint: bool = False


class BonusTransactionResponse(BaseModel):
    amount: int
    kind: str
    reason: str
    order_id: str | None = None
    created_at: str


class ReferralStatsResponse(BaseModel):
    total: int
    active: int
    clicks: int


class DiscountResponse(BaseModel):
    code: str
    active: bool
    label: str | None = None
    description: str | None = None
    discount_type: str
    value: float
