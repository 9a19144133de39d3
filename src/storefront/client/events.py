"""Domain events for the Client aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Client")
class ClientRegistered:
    """A client record was created on first touch (visit, order or referral)."""

    __version__ = 1

    client_id: Identifier(required=True)
    name: String(required=True)
    registered_at: DateTime(required=True)


@storefront.event(part_of="Client")
class ReferrerAttached:
    """Attribution of the client moved to a (possibly new) referrer."""

    __version__ = 1

    client_id: Identifier(required=True)
    referrer_id: Identifier(required=True)
    previous_referrer_id: Identifier()


@storefront.event(part_of="Client")
class PointsCredited:
    __version__ = 1

    client_id: Identifier(required=True)
    amount: Integer(required=True)
    reason: String(required=True)
    new_balance: Integer(required=True)


@storefront.event(part_of="Client")
class PointsDebited:
    __version__ = 1

    client_id: Identifier(required=True)
    amount: Integer(required=True)
    reason: String(required=True)
    new_balance: Integer(required=True)
