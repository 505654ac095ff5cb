"""Typed errors raised by the Reviews domain.

Validation and not-found kinds extend the framework's own exceptions, so
the framework's FastAPI exception handlers map them to 400 and 404. The
remaining kinds (conflict, forbidden, drift) derive from ``ReviewsError``;
``reviews.api.handlers`` maps them to HTTP responses.

Every error carries a ``messages`` dict of ``{field: [message, ...]}``.
"""

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError


class ReviewsError(Exception):
    """Base class for domain errors that are not validation or lookup failures."""

    def __init__(self, messages: dict):
        self.messages = messages
        super().__init__(messages)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
class InvalidRating(ValidationError):
    def __init__(self, rating):
        super().__init__({"rating": [f"Rating must be an integer between 1 and 5, got {rating!r}"]})


class InvalidInput(ValidationError):
    pass


class InvalidTransition(ValidationError):
    pass


class SelfVote(ValidationError):
    def __init__(self):
        super().__init__({"vote": ["You cannot vote on your own review"]})


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------
class NotFoundError(ObjectNotFoundError):
    pass


class ReviewNotFound(NotFoundError):
    def __init__(self, review_id):
        super().__init__({"_entity": [f"Review `{review_id}` was not found"]})


class StoreNotFound(NotFoundError):
    def __init__(self, store_id):
        super().__init__({"_entity": [f"Store `{store_id}` was not found"]})


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------
class ConflictError(ReviewsError):
    pass


class DuplicateReview(ConflictError):
    def __init__(self, user_id, store_id):
        super().__init__({"review": [f"User `{user_id}` has already reviewed store `{store_id}`"]})


class StaleWrite(ConflictError, ExpectedVersionError):
    """A write lost an optimistic concurrency check.

    Also an ``ExpectedVersionError``, so command handlers are retried by the
    framework with a fresh read before the conflict reaches the caller.
    """

    def __init__(self, entity_name, identifier):
        super().__init__({"_entity": [f"{entity_name} `{identifier}` was modified by another operation"]})


class DuplicateSlug(ConflictError):
    def __init__(self, slug):
        super().__init__({"slug": [f"Slug `{slug}` is already taken"]})


class DuplicateStore(ConflictError):
    def __init__(self, name):
        super().__init__({"name": [f"You already have a store named `{name}`"]})


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------
class ForbiddenError(ReviewsError):
    pass


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------
class InvariantRepairNeeded(ReviewsError):
    """Stored rating fields of a store no longer match its approved reviews."""

    def __init__(self, store_id, stored, computed):
        self.store_id = store_id
        self.stored = stored
        self.computed = computed
        super().__init__(
            {
                "store": [
                    f"Rating fields of store `{store_id}` drifted: "
                    f"stored {stored.average}/{stored.total}, "
                    f"computed {computed.average}/{computed.total}"
                ]
            }
        )
