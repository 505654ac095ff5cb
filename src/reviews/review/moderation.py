"""FlagReview / UnflagReview / ApproveReview / RejectReview.

Moves a review through the moderation state machine in
``reviews.review.state_machine``. Any user may flag; the other verbs are
admin-only. The store rating is recomputed only when the review entered or
left the approved set.
"""

import structlog
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.aggregation import RatingAggregator
from reviews.review.review import Review

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class FlagReview:
    review_id = Identifier(required=True)
    reason = String()  # spam | inappropriate | fake | offensive | other
    actor_id = Identifier()


@reviews.command(part_of="Review")
class UnflagReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)


@reviews.command(part_of="Review")
class ApproveReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)


@reviews.command(part_of="Review")
class RejectReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    reason = String()


@reviews.command_handler(part_of=Review)
class ModerationHandler:
    def _finish(self, repo, review, action, approval_changed):
        repo.update(review)
        if approval_changed:
            RatingAggregator().recompute(review.store_id)

        logger.info(
            f"review_{action}",
            review_id=str(review.id),
            status=review.status,
            approval_changed=approval_changed,
        )
        return review.to_dict()

    @handle(FlagReview)
    def flag_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)
        changed = review.flag(command.reason, flagged_by=command.actor_id)
        return self._finish(repo, review, "flagged", changed)

    @handle(UnflagReview)
    def unflag_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)
        changed = review.unflag(moderator_id=command.actor_id, actor_role=command.actor_role)
        return self._finish(repo, review, "unflagged", changed)

    @handle(ApproveReview)
    def approve_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)
        changed = review.approve(moderator_id=command.actor_id, actor_role=command.actor_role)
        return self._finish(repo, review, "approved", changed)

    @handle(RejectReview)
    def reject_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)
        changed = review.reject(
            moderator_id=command.actor_id,
            actor_role=command.actor_role,
            reason=command.reason,
        )
        return self._finish(repo, review, "rejected", changed)
