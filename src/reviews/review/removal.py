"""RemoveReview — delete a review for good.

The author or an admin may remove a review. The store id is captured
before the delete so the store rating can be recomputed afterwards.
"""

import structlog
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.access import is_admin, require
from reviews.domain import reviews
from reviews.review.aggregation import RatingAggregator
from reviews.review.review import Review

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class RemoveReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)


@reviews.command_handler(part_of=Review)
class RemoveReviewHandler:
    @handle(RemoveReview)
    def remove_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)

        require(
            review.is_authored_by(command.actor_id) or is_admin(command.actor_role),
            "You can only remove your own reviews",
        )

        store_id = review.store_id
        repo.delete(review.id)

        RatingAggregator().recompute(store_id)

        logger.info(
            "review_removed",
            review_id=str(command.review_id),
            store_id=str(store_id),
            removed_by=str(command.actor_id),
        )
