"""Moderation notifications — tell people what happened to a review.

Flagged reviews alert the moderation team; approvals, rejections and
restored reviews are reported to the author. Delivery goes through the
notifier port and never fails the moderation command: errors are logged
and dropped.
"""

import structlog
from protean.utils.mixins import handle

from reviews.config import get_moderation_recipient
from reviews.domain import reviews
from reviews.ports import get_notifier
from reviews.review.events import ReviewApproved, ReviewFlagged, ReviewRejected, ReviewUnflagged
from reviews.review.review import Review

logger = structlog.get_logger(__name__)


def _deliver(recipient_id: str, subject: str, body: str, review_id: str) -> dict | None:
    try:
        result = get_notifier().send(recipient_id=recipient_id, subject=subject, body=body)
    except Exception as exc:
        logger.warning("notification_failed", review_id=review_id, recipient_id=recipient_id, error=str(exc))
        return None

    if result.get("status") != "sent":
        logger.warning(
            "notification_failed",
            review_id=review_id,
            recipient_id=recipient_id,
            error=result.get("error"),
        )
    else:
        logger.info(
            "notification_sent",
            review_id=review_id,
            recipient_id=recipient_id,
            message_id=result.get("message_id"),
        )
    return result


@reviews.event_handler(part_of=Review)
class ModerationNotificationHandler:
    """Sends moderation notices through the configured notifier."""

    @handle(ReviewFlagged)
    def on_review_flagged(self, event: ReviewFlagged) -> None:
        _deliver(
            recipient_id=get_moderation_recipient(),
            subject="Review flagged for moderation",
            body=f"Review {event.review_id} on store {event.store_id} was flagged as {event.reason}.",
            review_id=str(event.review_id),
        )

    @handle(ReviewApproved)
    def on_review_approved(self, event: ReviewApproved) -> None:
        _deliver(
            recipient_id=str(event.user_id),
            subject="Your review is live",
            body=f"Your review {event.review_id} has been approved and now counts toward the store rating.",
            review_id=str(event.review_id),
        )

    @handle(ReviewRejected)
    def on_review_rejected(self, event: ReviewRejected) -> None:
        body = f"Your review {event.review_id} was rejected by a moderator."
        if event.reason:
            body = f"{body} Reason: {event.reason}"
        _deliver(
            recipient_id=str(event.user_id),
            subject="Your review was rejected",
            body=body,
            review_id=str(event.review_id),
        )

    @handle(ReviewUnflagged)
    def on_review_unflagged(self, event: ReviewUnflagged) -> None:
        _deliver(
            recipient_id=str(event.user_id),
            subject="Your review has been restored",
            body=f"A moderator cleared the flag on your review {event.review_id}.",
            review_id=str(event.review_id),
        )
