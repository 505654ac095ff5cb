"""Store Reviews & Ratings bounded context.

Handles the store catalogue (registration, slugs), the review lifecycle
(submission, editing, removal, owner replies, helpful votes), review
moderation, and the store rating aggregation that is recomputed after
every change to a store's set of approved reviews.
"""

from protean.domain import Domain

from reviews.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
reviews = Domain(name="reviews")
