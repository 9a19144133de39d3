import pytest
from protean import current_domain


@pytest.fixture(scope="session")
def _storefront_domain():
    """Initialize the storefront domain once per session."""
    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain, monkeypatch):
    """Push domain context before each test, cleanup after."""
    from storefront.notifications.channel import reset_messenger

    monkeypatch.setenv("OPERATOR_CHAT_ID", "operator-chat")
    reset_messenger()

    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()
    reset_messenger()


@pytest.fixture()
def messenger():
    from storefront.notifications.channel import get_messenger

    return get_messenger()


@pytest.fixture()
def make_product():
    """Register a product through the catalogue command and return it."""
    from storefront.catalogue.management import RegisterProduct
    from storefront.catalogue.product import Product

    def _make(product_id="prod-001", name="Green Tea", price=500.0, stock=10):
        current_domain.process(
            RegisterProduct(product_id=product_id, name=name, price=price, stock=stock),
            asynchronous=False,
        )
        return current_domain.repository_for(Product).get(product_id)

    return _make


@pytest.fixture()
def make_client():
    """Create a client with an opening balance recorded through the ledger.

    ``welcomed`` books 100 of the balance as an earlier welcome bonus, the
    way a client with completed orders would have it.
    """
    from storefront.client.client import Client
    from storefront.wallet.ledger import Ledger
    from storefront.wallet.rewards import WELCOME_BONUS
    from storefront.wallet.transaction import TransactionKind

    def _make(client_id="client-001", balance=0, completed_orders=0, referrer_id=None, welcomed=False):
        clients = current_domain.repository_for(Client)
        client, _ = clients.ensure(client_id)
        client.completed_orders = completed_orders
        client.referrer_id = referrer_id
        clients.add(client)

        ledger = Ledger()
        if welcomed:
            ledger.credit(client, WELCOME_BONUS, "Welcome Bonus", kind=TransactionKind.WELCOME_BONUS)
            balance -= WELCOME_BONUS
        if balance:
            ledger.credit(client, balance, "Opening balance", kind=TransactionKind.ADJUSTMENT)
        return clients.get(client_id)

    return _make


@pytest.fixture()
def submit():
    """Process a SubmitOrder command for ``lines`` of ``(product_id, quantity)``."""
    import json

    from storefront.order.submission import SubmitOrder

    def _submit(client_id, lines, requested_total, bonus_points=0, promo_code=None, delivery=None):
        return current_domain.process(
            SubmitOrder(
                client_id=client_id,
                items=json.dumps([{"product_id": pid, "quantity": qty} for pid, qty in lines]),
                requested_total=requested_total,
                bonus_points=bonus_points,
                promo_code=promo_code,
                delivery=json.dumps(delivery) if delivery else None,
            ),
            asynchronous=False,
        )

    return _submit


@pytest.fixture()
def confirm():
    from storefront.order.confirmation import ConfirmOrder

    def _confirm(order_id):
        return current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)

    return _confirm


@pytest.fixture()
def cancel():
    from storefront.order.cancellation import CancelOrder

    def _cancel(order_id):
        return current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)

    return _cancel
