"""Domain events for the Review aggregate.

All events are versioned, immutable facts. Moderation events are picked up
by ``reviews.review.notifications`` to inform authors and moderators.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A user rated a store."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(max_length=200)
    status = String(required=True)
    is_verified_purchase = Boolean(default=False)
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewEdited:
    """The author changed the review content."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    rating = Integer(required=True)
    previous_rating = Integer(required=True)
    title = String(max_length=200)
    edited_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewFlagged:
    """The review was flagged and no longer counts toward the store rating."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = String(required=True)
    flagged_by = Identifier()
    flagged_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewUnflagged:
    """An admin cleared the flag and restored the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    user_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    unflagged_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewApproved:
    """An admin approved the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    moderator_id = Identifier(required=True)
    approved_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewRejected:
    """An admin rejected the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    user_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    reason = String()
    rejected_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReplyPosted:
    """The store owner (or an admin) replied to the review, replacing any earlier reply."""

    __version__ = 1

    review_id = Identifier(required=True)
    author_id = Identifier(required=True)
    text = Text(required=True)
    replied_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReplyRemoved:
    __version__ = 1

    review_id = Identifier(required=True)
    removed_at = DateTime(required=True)


@reviews.event(part_of="Review")
class HelpfulVoteRecorded:
    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    helpful_votes = Integer(required=True)
    voted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class HelpfulVoteRetracted:
    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    helpful_votes = Integer(required=True)
    retracted_at = DateTime(required=True)
