"""Review aggregate — a user's 1-5 star rating of a store.

A user rates a given store at most once; the ``(user_id, store_id)`` pair is
also stored as ``user_store_key``, a unique column that backs the
one-review-per-user-per-store rule at the storage level.

Moderation fields (``status``, ``is_approved``, ``is_flagged``,
``flag_reason``) change only through the moderation methods below, which
consult ``reviews.review.state_machine``. Each of them reports whether
``is_approved`` changed, which is what decides if the store rating must be
recomputed.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from urllib.parse import urlparse

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text, ValueObject

from reviews.domain import reviews
from reviews.errors import InvalidInput, InvalidRating, SelfVote
from reviews.review.events import (
    HelpfulVoteRecorded,
    HelpfulVoteRetracted,
    ReplyPosted,
    ReplyRemoved,
    ReviewApproved,
    ReviewEdited,
    ReviewFlagged,
    ReviewRejected,
    ReviewSubmitted,
    ReviewUnflagged,
)
from reviews.review.state_machine import ModerationAction, ReviewStatus, next_status

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

MAX_TITLE_LENGTH = 200
MAX_COMMENT_LENGTH = 2000
MAX_IMAGES = 5
MAX_REPLY_LENGTH = 1000


class FlagReason(Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    FAKE = "fake"
    OFFENSIVE = "offensive"
    OTHER = "other"


def user_store_key(user_id, store_id) -> str:
    return f"{user_id}:{store_id}"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------
def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRating(rating)
    return rating


def _is_absolute_url(value) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_content(title=None, comment=None, images=None) -> None:
    """Check title, comment and image constraints, raising ``InvalidInput``."""
    errors = {}

    if title is not None and len(title) > MAX_TITLE_LENGTH:
        errors["title"] = [f"Title cannot exceed {MAX_TITLE_LENGTH} characters"]
    if comment is not None and len(comment) > MAX_COMMENT_LENGTH:
        errors["comment"] = [f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters"]
    if images is not None:
        if len(images) > MAX_IMAGES:
            errors["images"] = [f"Maximum {MAX_IMAGES} images allowed per review"]
        elif not all(_is_absolute_url(url) for url in images):
            errors["images"] = ["All images must be absolute http(s) URLs"]

    if errors:
        raise InvalidInput(errors)


def validate_reply_text(text) -> str:
    if not text or not text.strip():
        raise InvalidInput({"text": ["Reply text is required"]})
    if len(text) > MAX_REPLY_LENGTH:
        raise InvalidInput({"text": [f"Reply text cannot exceed {MAX_REPLY_LENGTH} characters"]})
    return text


def validate_flag_reason(reason) -> FlagReason:
    if not reason:
        raise InvalidInput({"reason": ["Flag reason is required when a review is flagged"]})
    try:
        return FlagReason(reason)
    except ValueError:
        allowed = ", ".join(r.value for r in FlagReason)
        raise InvalidInput({"reason": [f"Flag reason must be one of: {allowed}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@reviews.value_object(part_of="Review")
class StoreReply:
    """The single reply a store owner (or an admin) may attach to a review."""

    text = Text(required=True)
    author_id = Identifier(required=True)
    replied_at = DateTime(required=True)

    @invariant.post
    def text_within_limit(self):
        if self.text is not None and len(self.text) > MAX_REPLY_LENGTH:
            raise ValidationError({"text": [f"Reply text cannot exceed {MAX_REPLY_LENGTH} characters"]})


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    """A user's rating of a store, with optional text, images and an owner reply."""

    # Core identifiers
    user_id = Identifier(required=True)
    store_id = Identifier(required=True)
    user_store_key = String(required=True, max_length=255, unique=True)

    # Content
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(max_length=MAX_TITLE_LENGTH)
    comment = Text()
    images = Text()  # JSON array of URLs

    # Engagement
    helpful_votes = Integer(default=0, min_value=0)
    reply = ValueObject(StoreReply)

    # Verification, set once at submission
    is_verified_purchase = Boolean(default=False)

    # Moderation
    status = String(choices=ReviewStatus, default=ReviewStatus.APPROVED.value)
    is_approved = Boolean(default=True)
    is_flagged = Boolean(default=False)
    flag_reason = String(choices=FlagReason)
    moderated_by = Identifier()

    # Optimistic concurrency counter, maintained by ReviewRepository.update
    revision = Integer(default=0)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.image_urls) > MAX_IMAGES:
            raise ValidationError({"images": [f"Maximum {MAX_IMAGES} images allowed per review"]})

    @invariant.post
    def flagged_review_needs_reason(self):
        if self.is_flagged and not self.flag_reason:
            raise ValidationError({"flag_reason": ["Flag reason is required when review is flagged"]})

    @invariant.post
    def approval_matches_status(self):
        if self.status is not None and bool(self.is_approved) != (self.status == ReviewStatus.APPROVED.value):
            raise ValidationError({"is_approved": ["Only reviews in Approved status count as approved"]})

    @invariant.post
    def flag_matches_status(self):
        if self.status is not None and bool(self.is_flagged) != (self.status == ReviewStatus.FLAGGED.value):
            raise ValidationError({"is_flagged": ["Only reviews in Flagged status can be flagged"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        user_id,
        store_id,
        rating,
        title=None,
        comment=None,
        images=None,
        is_verified_purchase=False,
        auto_approve=True,
    ):
        """Submit a new review, approved immediately or pending moderation."""
        validate_rating(rating)
        validate_content(title=title, comment=comment, images=images)

        now = datetime.now(UTC)
        status = ReviewStatus.APPROVED if auto_approve else ReviewStatus.PENDING

        review = cls(
            user_id=user_id,
            store_id=store_id,
            user_store_key=user_store_key(user_id, store_id),
            rating=rating,
            title=title,
            comment=comment,
            images=json.dumps(list(images)) if images else None,
            helpful_votes=0,
            is_verified_purchase=bool(is_verified_purchase),
            status=status.value,
            is_approved=status == ReviewStatus.APPROVED,
            is_flagged=False,
            revision=0,
            created_at=now,
            updated_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                store_id=str(store_id),
                user_id=str(user_id),
                rating=rating,
                title=title,
                status=status.value,
                is_verified_purchase=bool(is_verified_purchase),
                image_count=len(images) if images else 0,
                submitted_at=now,
            )
        )

        return review

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def image_urls(self) -> list[str]:
        return json.loads(self.images) if self.images else []

    def is_authored_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(self, rating=_UNSET, title=_UNSET, comment=_UNSET, images=_UNSET) -> bool:
        """Apply a partial content update. Returns True if the rating changed."""
        if rating is not _UNSET:
            validate_rating(rating)
        validate_content(
            title=None if title is _UNSET else title,
            comment=None if comment is _UNSET else comment,
            images=None if images is _UNSET else images,
        )

        now = datetime.now(UTC)
        previous_rating = self.rating

        with atomic_change(self):
            if rating is not _UNSET:
                self.rating = rating
            if title is not _UNSET:
                self.title = title
            if comment is not _UNSET:
                self.comment = comment
            if images is not _UNSET:
                self.images = json.dumps(list(images)) if images else None
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                store_id=str(self.store_id),
                rating=self.rating,
                previous_rating=previous_rating,
                title=self.title,
                edited_at=now,
            )
        )

        return self.rating != previous_rating

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def _move_to(self, target: ReviewStatus, now, flag_reason=None, moderator_id=None) -> bool:
        """Set status and the fields derived from it. Returns True if approval changed."""
        was_approved = bool(self.is_approved)

        with atomic_change(self):
            self.status = target.value
            self.is_approved = target == ReviewStatus.APPROVED
            self.is_flagged = target == ReviewStatus.FLAGGED
            self.flag_reason = flag_reason if target == ReviewStatus.FLAGGED else None
            if moderator_id is not None:
                self.moderated_by = moderator_id
            self.updated_at = now

        return was_approved != self.is_approved

    def flag(self, reason, flagged_by=None) -> bool:
        """Flag the review; it stops counting toward the store rating."""
        flag_reason = validate_flag_reason(reason)
        target = next_status(ReviewStatus(self.status), ModerationAction.FLAG)
        if target is None:
            return False

        now = datetime.now(UTC)
        approval_changed = self._move_to(target, now, flag_reason=flag_reason.value)

        self.raise_(
            ReviewFlagged(
                review_id=str(self.id),
                store_id=str(self.store_id),
                user_id=str(self.user_id),
                reason=flag_reason.value,
                flagged_by=str(flagged_by) if flagged_by else None,
                flagged_at=now,
            )
        )
        return approval_changed

    def unflag(self, moderator_id, actor_role) -> bool:
        """Clear the flag and restore the review to Approved."""
        target = next_status(ReviewStatus(self.status), ModerationAction.UNFLAG, actor_role)
        if target is None:
            return False

        now = datetime.now(UTC)
        approval_changed = self._move_to(target, now, moderator_id=moderator_id)

        self.raise_(
            ReviewUnflagged(
                review_id=str(self.id),
                store_id=str(self.store_id),
                user_id=str(self.user_id),
                moderator_id=str(moderator_id),
                unflagged_at=now,
            )
        )
        return approval_changed

    def approve(self, moderator_id, actor_role) -> bool:
        """Approve a pending or flagged review."""
        target = next_status(ReviewStatus(self.status), ModerationAction.APPROVE, actor_role)
        if target is None:
            return False

        now = datetime.now(UTC)
        approval_changed = self._move_to(target, now, moderator_id=moderator_id)

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                store_id=str(self.store_id),
                user_id=str(self.user_id),
                rating=self.rating,
                moderator_id=str(moderator_id),
                approved_at=now,
            )
        )
        return approval_changed

    def reject(self, moderator_id, actor_role, reason=None) -> bool:
        """Reject the review; it stops counting toward the store rating."""
        target = next_status(ReviewStatus(self.status), ModerationAction.REJECT, actor_role)
        if target is None:
            return False

        now = datetime.now(UTC)
        approval_changed = self._move_to(target, now, moderator_id=moderator_id)

        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                store_id=str(self.store_id),
                user_id=str(self.user_id),
                moderator_id=str(moderator_id),
                reason=reason,
                rejected_at=now,
            )
        )
        return approval_changed

    # -------------------------------------------------------------------
    # Store reply
    # -------------------------------------------------------------------
    def post_reply(self, author_id, text):
        """Attach a reply, replacing any earlier one."""
        validate_reply_text(text)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.reply = StoreReply(text=text, author_id=author_id, replied_at=now)
            self.updated_at = now

        self.raise_(
            ReplyPosted(
                review_id=str(self.id),
                author_id=str(author_id),
                text=text,
                replied_at=now,
            )
        )

    def remove_reply(self):
        if self.reply is None:
            return

        now = datetime.now(UTC)
        with atomic_change(self):
            self.reply = None
            self.updated_at = now

        self.raise_(ReplyRemoved(review_id=str(self.id), removed_at=now))

    # -------------------------------------------------------------------
    # Helpful votes
    # -------------------------------------------------------------------
    def add_helpful_vote(self, voter_id) -> int:
        """Count one helpful vote.

        Votes are not tracked per voter, so the same user may vote repeatedly.
        """
        if self.is_authored_by(voter_id):
            raise SelfVote()

        now = datetime.now(UTC)
        with atomic_change(self):
            self.helpful_votes = (self.helpful_votes or 0) + 1
            self.updated_at = now

        self.raise_(
            HelpfulVoteRecorded(
                review_id=str(self.id),
                voter_id=str(voter_id),
                helpful_votes=self.helpful_votes,
                voted_at=now,
            )
        )
        return self.helpful_votes

    def remove_helpful_vote(self, voter_id) -> int:
        """Take back one helpful vote; the counter never goes below zero."""
        if self.is_authored_by(voter_id):
            raise SelfVote()
        if not self.helpful_votes:
            return 0

        now = datetime.now(UTC)
        with atomic_change(self):
            self.helpful_votes = self.helpful_votes - 1
            self.updated_at = now

        self.raise_(
            HelpfulVoteRetracted(
                review_id=str(self.id),
                voter_id=str(voter_id),
                helpful_votes=self.helpful_votes,
                retracted_at=now,
            )
        )
        return self.helpful_votes
