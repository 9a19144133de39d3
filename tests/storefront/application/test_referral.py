"""Application tests for attaching referrers and referral statistics."""

from protean import current_domain
from storefront.client.client import PLACEHOLDER_REFERRER_NAME, Client
from storefront.client.referral import AttachReferral, referral_stats


def _attach(client_id, referrer_id):
    return current_domain.process(AttachReferral(client_id=client_id, referrer_id=referrer_id), asynchronous=False)


def _client(client_id):
    return current_domain.repository_for(Client).get(client_id)


class TestAttachReferral:
    def test_attaches_and_creates_both_clients(self):
        result = _attach("client-001", "referrer-001")

        assert result == {"attached": True}
        assert _client("client-001").referrer_id == "referrer-001"
        referrer = _client("referrer-001")
        assert referrer.name == PLACEHOLDER_REFERRER_NAME
        assert referrer.referral_clicks == 1

    def test_existing_referrer_keeps_its_name(self, make_client):
        clients = current_domain.repository_for(Client)
        referrer = make_client("referrer-001")
        referrer.update_contact(name="Alice")
        clients.add(referrer)

        _attach("client-001", "referrer-001")

        assert _client("referrer-001").name == "Alice"

    def test_repeated_link_counts_clicks(self):
        _attach("client-001", "referrer-001")
        _attach("client-001", "referrer-001")
        assert _client("referrer-001").referral_clicks == 2

    def test_later_link_replaces_referrer_before_first_purchase(self):
        _attach("client-001", "referrer-001")
        _attach("client-001", "referrer-002")
        assert _client("client-001").referrer_id == "referrer-002"

    def test_self_referral_registers_client_without_referrer(self):
        result = _attach("client-001", "client-001")

        assert result == {"attached": False}
        client = _client("client-001")
        assert client.referrer_id is None
        assert client.referral_clicks == 0

    def test_locked_after_first_completed_order(self, make_client):
        make_client("client-001", completed_orders=1, referrer_id="referrer-001")

        result = _attach("client-001", "referrer-002")

        assert result == {"attached": False}
        assert _client("client-001").referrer_id == "referrer-001"
        assert current_domain.repository_for(Client).find("referrer-002") is None


class TestReferralStats:
    def test_counts_referred_and_active_clients(self, make_product, submit):
        make_product(price=500.0)
        _attach("friend-1", "referrer-001")
        _attach("friend-2", "referrer-001")
        _attach("friend-2", "referrer-001")
        submit("friend-1", [("prod-001", 1)], 500.0)

        assert referral_stats("referrer-001") == {"total": 2, "active": 1, "clicks": 3}

    def test_cancelled_orders_are_not_activity(self, make_product, submit, cancel):
        make_product(price=500.0)
        _attach("friend-1", "referrer-001")
        cancel(submit("friend-1", [("prod-001", 1)], 500.0)["order_id"])

        assert referral_stats("referrer-001")["active"] == 0

    def test_unknown_referrer(self):
        assert referral_stats("nobody") == {"total": 0, "active": 0, "clicks": 0}

    def test_counts_every_referred_client(self):
        for n in range(105):
            _attach(f"friend-{n}", "referrer-001")

        assert referral_stats("referrer-001")["total"] == 105
