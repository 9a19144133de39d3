"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from storefront import services
from storefront.catalogue.product import Product
from storefront.client.client import Client
from storefront.errors import (
    BalanceError,
    NotFoundError,
    PriceMismatchError,
    StockError,
    StorefrontError,
    TransitionError,
)
from storefront.order.order import Order

_ERRORS = {
    "balance error": BalanceError,
    "stock error": StockError,
    "price mismatch": PriceMismatchError,
    "transition error": TransitionError,
    "not found error": NotFoundError,
}


@pytest.fixture()
def outcome():
    """What the last When step produced: its result, its error, the last order placed."""
    return {"result": None, "error": None, "order_id": None}


def _attempt(outcome, call):
    outcome["result"], outcome["error"] = None, None
    try:
        outcome["result"] = call()
    except StorefrontError as exc:
        outcome["error"] = exc


def _order(outcome, client_id, quantity, product_id, total, points=0, code=None):
    def call():
        return services.submit_order(
            client_id,
            [{"product_id": product_id, "quantity": quantity}],
            total,
            bonus_points=points,
            promo_code=code,
        )

    _attempt(outcome, call)
    if outcome["result"]:
        outcome["order_id"] = outcome["result"]["order_id"]


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id}" priced {price:g} with {stock:d} in stock'))
def _(make_product, product_id, price, stock):
    make_product(product_id=product_id, price=price, stock=stock)


@given(parsers.cfparse('a client "{client_id}" with {balance:d} bonus points'))
def _(make_client, client_id, balance):
    make_client(client_id, balance=balance)


@given(parsers.cfparse('a returning client "{client_id}" with {balance:d} bonus points referred by "{referrer_id}"'))
def _(make_client, client_id, balance, referrer_id):
    make_client(referrer_id)
    make_client(client_id, balance=balance, completed_orders=1, referrer_id=referrer_id, welcomed=True)


@given(parsers.cfparse('"{client_id}" followed an invite link from "{referrer_id}"'))
def _(client_id, referrer_id):
    services.attach_referral(client_id, referrer_id)


@given(parsers.cfparse('"{client_id}" has placed an order of {quantity:d} x "{product_id}" for {total:g}'))
def _(outcome, client_id, quantity, product_id, total):
    _order(outcome, client_id, quantity, product_id, total)
    assert outcome["error"] is None, outcome["error"]


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{client_id}" orders {quantity:d} x "{product_id}" for {total:g}'))
def _(outcome, client_id, quantity, product_id, total):
    _order(outcome, client_id, quantity, product_id, total)


@when(parsers.cfparse('"{client_id}" orders {quantity:d} x "{product_id}" for {total:g} spending {points:d} points'))
def _(outcome, client_id, quantity, product_id, total, points):
    _order(outcome, client_id, quantity, product_id, total, points=points)


@when(parsers.cfparse('"{client_id}" orders {quantity:d} x "{product_id}" for {total:g} with code "{code}"'))
def _(outcome, client_id, quantity, product_id, total, code):
    _order(outcome, client_id, quantity, product_id, total, code=code)


@when(parsers.cfparse('"{client_id}" follows an invite link from "{referrer_id}"'))
def _(outcome, client_id, referrer_id):
    _attempt(outcome, lambda: services.attach_referral(client_id, referrer_id))


@when("the operator confirms the order")
def _(outcome):
    _attempt(outcome, lambda: services.confirm_order(outcome["order_id"]))


@when("the operator cancels the order")
def _(outcome):
    _attempt(outcome, lambda: services.cancel_order(outcome["order_id"]))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order is placed with a total of {total:g}"))
def _(outcome, total):
    assert outcome["error"] is None, outcome["error"]
    assert outcome["result"]["total"] == pytest.approx(total)


@then(parsers.cfparse("the request fails with a {error}"))
def _(outcome, error):
    assert isinstance(outcome["error"], _ERRORS[error])


@then(parsers.cfparse('the operator action reports "{status}"'))
def _(outcome, status):
    assert outcome["error"] is None, outcome["error"]
    assert outcome["result"]["status"] == status


@then(parsers.cfparse('the order status is "{status}"'))
def _(outcome, status):
    assert current_domain.repository_for(Order).get(outcome["order_id"]).status == status


@then(parsers.cfparse('"{client_id}" has {balance:d} bonus points'))
def _(client_id, balance):
    assert current_domain.repository_for(Client).get(client_id).bonus_balance == balance


@then(parsers.cfparse('"{product_id}" has {stock:d} in stock'))
def _(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock
