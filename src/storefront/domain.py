"""Storefront domain: order fulfillment and loyalty ledger.

Validates submitted orders against live prices and stock, moves orders
through New → Completed | Cancelled on operator action, and keeps the
bonus-point wallet with referral commissions and promo discounts.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
