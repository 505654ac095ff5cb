"""Domain events for the Store aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from reviews.domain import reviews


@reviews.event(part_of="Store")
class StoreRegistered:
    """A store owner registered a new store."""

    __version__ = 1

    store_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    slug = String(required=True, max_length=255)
    category = String(required=True)
    registered_at = DateTime(required=True)


@reviews.event(part_of="Store")
class StoreDetailsUpdated:
    """Store details changed; carries the slug in effect after the change."""

    __version__ = 1

    store_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    slug = String(required=True, max_length=255)
    updated_at = DateTime(required=True)


@reviews.event(part_of="Store")
class StoreRatingRecomputed:
    """The store's aggregate rating fields were recomputed from its approved reviews."""

    __version__ = 1

    store_id = Identifier(required=True)
    average_rating = Float(required=True)
    total_reviews = Integer(required=True)
    recomputed_at = DateTime(required=True)
