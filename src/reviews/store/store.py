"""Store aggregate — a reviewable store and its derived rating fields.

``average_rating``, ``total_reviews`` and ``rating_distribution`` are
derived from the store's approved reviews. No store command accepts them;
they are written only through ``_apply_rating_stats``, which is called by
``reviews.review.aggregation.RatingAggregator``.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from reviews.domain import reviews
from reviews.store.events import StoreDetailsUpdated, StoreRatingRecomputed, StoreRegistered
from reviews.store.slug import is_valid_slug

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class StoreCategory(Enum):
    RESTAURANT = "restaurant"
    RETAIL = "retail"
    GROCERY = "grocery"
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    HEALTH = "health"
    BEAUTY = "beauty"
    AUTOMOTIVE = "automotive"
    HOME_GARDEN = "home_garden"
    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    SERVICES = "services"
    OTHER = "other"


def empty_distribution() -> dict[str, int]:
    return {str(star): 0 for star in range(1, 6)}


@reviews.aggregate
class Store:
    """A store that customers can find and review."""

    owner_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    slug = String(required=True, max_length=255, unique=True)
    description = Text()
    category = String(choices=StoreCategory, required=True)

    is_active = Boolean(default=True)
    is_verified = Boolean(default=False)

    # Derived rating fields
    average_rating = Float(default=0.0)
    total_reviews = Integer(default=0)
    rating_distribution = Text()  # JSON: {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    ratings_updated_at = DateTime()

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def name_must_have_two_characters(self):
        if self.name is not None and len(self.name.strip()) < 2:
            raise ValidationError({"name": ["Store name must be between 2 and 200 characters"]})

    @invariant.post
    def description_cannot_exceed_maximum(self):
        if self.description and len(self.description) > 2000:
            raise ValidationError({"description": ["Description cannot exceed 2000 characters"]})

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug is not None and not is_valid_slug(self.slug):
            raise ValidationError({"slug": ["Slug can only contain lowercase letters, numbers, and hyphens"]})

    @invariant.post
    def rating_fields_in_range(self):
        if self.average_rating is not None and not 0 <= self.average_rating <= 5:
            raise ValidationError({"average_rating": ["Average rating must be between 0 and 5"]})
        if self.total_reviews is not None and self.total_reviews < 0:
            raise ValidationError({"total_reviews": ["Total reviews cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, owner_id, name, category, slug, description=None):
        """Register a new store with no reviews yet."""
        now = datetime.now(UTC)

        store = cls(
            owner_id=owner_id,
            name=name,
            slug=slug,
            description=description,
            category=category,
            is_active=True,
            is_verified=False,
            average_rating=0.0,
            total_reviews=0,
            rating_distribution=json.dumps(empty_distribution()),
            created_at=now,
            updated_at=now,
        )

        store.raise_(
            StoreRegistered(
                store_id=str(store.id),
                owner_id=str(owner_id),
                name=name,
                slug=slug,
                category=category,
                registered_at=now,
            )
        )

        return store

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=_UNSET,
        description=_UNSET,
        category=_UNSET,
        slug=_UNSET,
        is_verified=_UNSET,
    ):
        """Apply a partial update. The caller resolves the slug to use."""
        now = datetime.now(UTC)

        with atomic_change(self):
            if name is not _UNSET:
                self.name = name
            if description is not _UNSET:
                self.description = description
            if category is not _UNSET:
                self.category = category
            if slug is not _UNSET:
                self.slug = slug
            if is_verified is not _UNSET:
                self.is_verified = is_verified
            self.updated_at = now

        self.raise_(
            StoreDetailsUpdated(
                store_id=str(self.id),
                name=self.name,
                slug=self.slug,
                updated_at=now,
            )
        )

    def is_owned_by(self, user_id) -> bool:
        return str(self.owner_id) == str(user_id)

    # -------------------------------------------------------------------
    # Derived rating fields
    # -------------------------------------------------------------------
    @property
    def distribution(self) -> dict[str, int]:
        if not self.rating_distribution:
            return empty_distribution()
        return json.loads(self.rating_distribution)

    def _apply_rating_stats(self, average: Decimal, total: int, distribution: dict[str, int]):
        """Overwrite all derived rating fields together.

        Reserved for the rating aggregator.
        """
        now = datetime.now(UTC)

        with atomic_change(self):
            self.average_rating = float(average)
            self.total_reviews = total
            self.rating_distribution = json.dumps(distribution)
            self.ratings_updated_at = now
            self.updated_at = now

        self.raise_(
            StoreRatingRecomputed(
                store_id=str(self.id),
                average_rating=float(average),
                total_reviews=total,
                recomputed_at=now,
            )
        )
