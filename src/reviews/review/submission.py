"""SubmitReview — a user rates a store.

One review per user per store, enforced by the repository. The
verified-purchase flag comes from the purchase verification port; when the
port is unavailable the review is stored unverified. The moderation policy
decides whether the review counts right away (auto) or waits for an admin
(pre).
"""

import json

import structlog
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.config import ModerationPolicy, get_moderation_policy
from reviews.domain import reviews
from reviews.errors import DuplicateReview
from reviews.ports import get_purchase_verifier
from reviews.review.aggregation import RatingAggregator
from reviews.review.review import Review, validate_rating
from reviews.store.store import Store

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class SubmitReview:
    user_id = Identifier(required=True)
    store_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(max_length=200)
    comment = Text()
    images = Text()  # JSON array of URLs


def _verify_purchase(user_id, store_id) -> bool:
    try:
        return bool(get_purchase_verifier().has_purchased(str(user_id), str(store_id)))
    except Exception as exc:
        logger.warning(
            "purchase_verification_failed",
            user_id=str(user_id),
            store_id=str(store_id),
            error=str(exc),
        )
        return False


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        validate_rating(command.rating)
        current_domain.repository_for(Store).get_store(command.store_id)

        repo = current_domain.repository_for(Review)
        if repo.find_by_user_and_store(command.user_id, command.store_id) is not None:
            raise DuplicateReview(command.user_id, command.store_id)

        review = Review.submit(
            user_id=command.user_id,
            store_id=command.store_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            images=json.loads(command.images) if command.images else None,
            is_verified_purchase=_verify_purchase(command.user_id, command.store_id),
            auto_approve=get_moderation_policy() == ModerationPolicy.AUTO,
        )
        repo.insert(review)

        RatingAggregator().recompute(command.store_id)

        logger.info(
            "review_submitted",
            review_id=str(review.id),
            store_id=str(command.store_id),
            rating=command.rating,
            status=review.status,
        )
        return review.to_dict()
