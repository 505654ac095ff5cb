"""Repository for the Review aggregate.

Enforces the one-review-per-user-per-store rule on insert and optimistic
concurrency on update. ``user_store_key`` is declared unique on the
aggregate, so SQL providers also carry a unique index for the pair; the
lookup here gives the typed error, the index closes the race.
"""

from collections.abc import Iterator

from protean.exceptions import ObjectNotFoundError, ValidationError

from reviews.domain import reviews
from reviews.errors import DuplicateReview, ReviewNotFound, StaleWrite
from reviews.review.review import Review, user_store_key
from reviews.review.state_machine import ReviewStatus

_PAGE_SIZE = 100


@reviews.repository(part_of=Review)
class ReviewRepository:
    def get_review(self, review_id) -> Review:
        try:
            return self.get(review_id)
        except ObjectNotFoundError:
            raise ReviewNotFound(review_id) from None

    def find_by_user_and_store(self, user_id, store_id) -> Review | None:
        return self._dao.query.filter(user_store_key=user_store_key(user_id, store_id)).all().first

    def insert(self, review: Review) -> Review:
        if self.find_by_user_and_store(review.user_id, review.store_id) is not None:
            raise DuplicateReview(review.user_id, review.store_id)

        try:
            self.add(review)
        except ValidationError as exc:
            if "user_store_key" in (exc.messages or {}):
                raise DuplicateReview(review.user_id, review.store_id) from exc
            raise
        return review

    def update(self, review: Review) -> Review:
        """Persist changes if nobody else wrote the review since it was read."""
        try:
            stored = self._dao.get(review.id)
        except ObjectNotFoundError:
            raise ReviewNotFound(review.id) from None

        if stored.revision != review.revision:
            raise StaleWrite("Review", review.id)

        review.revision = review.revision + 1
        self.add(review)
        return review

    def delete(self, review_id) -> None:
        try:
            review = self._dao.get(review_id)
        except ObjectNotFoundError:
            raise ReviewNotFound(review_id) from None
        self._dao.delete(review)

    def delete_by_store(self, store_id) -> int:
        """Delete every review of a store, whatever its status. Returns the count."""
        doomed = list(self._iter_pages(store_id=str(store_id)))
        for review in doomed:
            self._dao.delete(review)
        return len(doomed)

    def _iter_pages(self, **filters) -> Iterator[Review]:
        offset = 0
        while True:
            page = self._dao.query.filter(**filters).order_by("id").offset(offset).limit(_PAGE_SIZE).all()
            yield from page.items
            if len(page.items) < _PAGE_SIZE:
                return
            offset += _PAGE_SIZE

    def list_approved_by_store(self, store_id) -> Iterator[Review]:
        """Stream the approved reviews of a store, one page at a time."""
        return self._iter_pages(store_id=str(store_id), is_approved=True)

    def list_by_store(self, store_id, offset: int = 0, limit: int = 10) -> list[Review]:
        """Approved reviews of a store, newest first."""
        return (
            self._dao.query.filter(store_id=str(store_id), is_approved=True)
            .order_by("-created_at")
            .offset(offset)
            .limit(limit)
            .all()
            .items
        )

    def list_by_rating(self, rating: int, store_id=None, offset: int = 0, limit: int = 10) -> list[Review]:
        """Approved reviews with exactly ``rating`` stars, newest first, optionally for one store."""
        filters = {"rating": rating, "is_approved": True}
        if store_id is not None:
            filters["store_id"] = str(store_id)
        return self._dao.query.filter(**filters).order_by("-created_at").offset(offset).limit(limit).all().items

    def list_by_user(self, user_id) -> list[Review]:
        return list(self._iter_pages(user_id=str(user_id)))

    def list_pending(self) -> list[Review]:
        """Moderation queue: reviews waiting for a first decision."""
        return list(self._iter_pages(status=ReviewStatus.PENDING.value))

    def list_flagged(self) -> list[Review]:
        return list(self._iter_pages(status=ReviewStatus.FLAGGED.value))
