"""EditReview — the author changes the content of their review.

Only fields present on the command are changed. Editing never moves the
review through moderation; the store rating is recomputed only when the
rating itself changed.
"""

import json

import structlog
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.access import require
from reviews.domain import reviews
from reviews.review.aggregation import RatingAggregator
from reviews.review.review import Review

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)  # Must match original author
    rating = Integer()
    title = String(max_length=200)
    comment = Text()
    images = Text()  # JSON array of URLs


@reviews.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)

        require(review.is_authored_by(command.actor_id), "Only the review author can edit this review")

        kwargs = {}
        if command.rating is not None:
            kwargs["rating"] = command.rating
        if command.title is not None:
            kwargs["title"] = command.title
        if command.comment is not None:
            kwargs["comment"] = command.comment
        if command.images is not None:
            kwargs["images"] = json.loads(command.images)

        rating_changed = review.edit(**kwargs)
        repo.update(review)

        if rating_changed:
            RatingAggregator().recompute(review.store_id)

        logger.info(
            "review_edited",
            review_id=str(review.id),
            fields=sorted(kwargs),
            rating_changed=rating_changed,
        )
        return review.to_dict()
