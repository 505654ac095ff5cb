"""Rating aggregation — derive a store's rating fields from its reviews.

The store's ``average_rating``, ``total_reviews`` and ``rating_distribution``
are always a function of its APPROVED reviews. Command handlers call
``RatingAggregator.recompute`` after every change that can move that set,
inside the same unit of work as the change itself, so both commit or
neither does.

Recomputation is a full rescan rather than an incremental update: it is
idempotent and repairs any earlier drift as a side effect.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from reviews.errors import InvariantRepairNeeded, StaleWrite
from reviews.review.review import Review
from reviews.store.store import Store, empty_distribution

logger = structlog.get_logger(__name__)

_TWO_PLACES = Decimal("0.01")


class RatingStats(NamedTuple):
    average: Decimal
    total: int
    distribution: dict[str, int]

    def to_dict(self) -> dict:
        return {
            "average_rating": float(self.average),
            "total_reviews": self.total,
            "rating_distribution": dict(self.distribution),
        }


def round_average(value: Decimal) -> Decimal:
    """Round half away from zero to two places: 4.125 -> 4.13, 4.5 -> 4.50."""
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def compute(ratings: Iterable[int]) -> RatingStats:
    """Fold a sequence of 1..5 ratings into rating statistics.

    >>> compute([5, 4, 4]).average
    Decimal('4.33')
    >>> compute([]).total
    0
    """
    distribution = empty_distribution()
    total = 0
    weighted_sum = 0
    for rating in ratings:
        distribution[str(rating)] += 1
        total += 1
        weighted_sum += rating

    if total == 0:
        return RatingStats(Decimal("0.00"), 0, distribution)
    return RatingStats(round_average(Decimal(weighted_sum) / Decimal(total)), total, distribution)


def stored_stats(store: Store) -> RatingStats:
    """Read the rating fields currently stored on ``store``."""
    average = round_average(Decimal(str(store.average_rating or 0.0)))
    return RatingStats(average, store.total_reviews or 0, store.distribution)


class RatingAggregator:
    """Keeps a store's derived rating fields in step with its approved reviews."""

    def _store_repo(self):
        return current_domain.repository_for(Store)

    def _review_repo(self):
        return current_domain.repository_for(Review)

    def compute(self, store_id) -> RatingStats:
        """Compute rating stats from the store's approved reviews, without saving."""
        return compute(review.rating for review in self._review_repo().list_approved_by_store(store_id))

    def recompute(self, store_id) -> RatingStats:
        """Rescan approved reviews and overwrite the store's rating fields.

        Raises ``StaleWrite`` when the store changed after it was read.
        """
        store_repo = self._store_repo()
        store = store_repo.get_store(store_id)

        stats = self.compute(store_id)
        store._apply_rating_stats(stats.average, stats.total, stats.distribution)
        try:
            store_repo.add(store)
        except ExpectedVersionError as exc:
            raise StaleWrite("Store", store_id) from exc

        logger.info(
            "store_rating_recomputed",
            store_id=str(store_id),
            average_rating=float(stats.average),
            total_reviews=stats.total,
        )
        return stats

    def verify(self, store_id) -> RatingStats:
        """Check the stored rating fields against a fresh computation.

        Raises ``InvariantRepairNeeded`` when they disagree.
        """
        store = self._store_repo().get_store(store_id)
        stored = stored_stats(store)
        computed = self.compute(store_id)

        if stored != computed:
            logger.warning(
                "rating_drift_detected",
                store_id=str(store_id),
                stored_average=float(stored.average),
                stored_total=stored.total,
                computed_average=float(computed.average),
                computed_total=computed.total,
            )
            raise InvariantRepairNeeded(store_id, stored, computed)
        return computed

    def reconcile(self, store_ids: Iterable | None = None) -> dict[str, RatingStats]:
        """Verify each store and recompute the ones that drifted.

        Checks every store when ``store_ids`` is not given. Returns the
        repaired stores keyed by id.
        """
        if store_ids is None:
            store_ids = list(self._store_repo().iter_ids())

        repaired = {}
        for store_id in store_ids:
            try:
                self.verify(store_id)
            except InvariantRepairNeeded:
                repaired[str(store_id)] = self.recompute(store_id)

        logger.info("ratings_reconciled", repaired=len(repaired))
        return repaired
