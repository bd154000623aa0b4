"""Marketplace bounded context: order lifecycle, checkout pricing, and rider dispatch.

Pure business rules for the food-delivery marketplace. Every operation takes
explicit snapshots and returns new snapshots or value objects; persistence,
auth, payments and notifications belong to the calling application.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
