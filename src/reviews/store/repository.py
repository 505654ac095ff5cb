"""Repository for the Store aggregate — slug, owner and browse lookups."""

from collections.abc import Iterable, Iterator
from typing import NamedTuple

from protean.exceptions import ObjectNotFoundError

from reviews.domain import reviews
from reviews.errors import StoreNotFound
from reviews.store.store import Store

_PAGE_SIZE = 100


class StorePage(NamedTuple):
    """One page of stores plus the number of stores matching the query."""

    items: list[Store]
    total: int


def _paginate(stores: list[Store], offset: int, limit: int) -> StorePage:
    return StorePage(stores[offset : offset + limit], len(stores))


def _newest_first(stores: Iterable[Store]) -> list[Store]:
    return sorted(stores, key=lambda store: store.created_at, reverse=True)


def _best_rated_first(stores: Iterable[Store]) -> list[Store]:
    # Stable sort: equally rated stores stay newest first
    return sorted(_newest_first(stores), key=lambda store: store.average_rating or 0.0, reverse=True)


def _mentions(store: Store, needle: str) -> bool:
    return needle in store.name.lower() or needle in (store.description or "").lower()


@reviews.repository(part_of=Store)
class StoreRepository:
    def get_store(self, store_id) -> Store:
        try:
            return self.get(store_id)
        except ObjectNotFoundError:
            raise StoreNotFound(store_id) from None

    def remove(self, store_id) -> None:
        self._dao.delete(self.get_store(store_id))

    def find_by_slug(self, slug: str) -> Store | None:
        return self._dao.query.filter(slug=slug).all().first

    def slug_exists(self, slug: str, exclude_store_id=None) -> bool:
        """Slug oracle for ``generate_slug``; optionally ignores one store."""
        store = self.find_by_slug(slug)
        if store is None:
            return False
        return exclude_store_id is None or str(store.id) != str(exclude_store_id)

    def _iter_pages(self, **filters) -> Iterator[Store]:
        offset = 0
        while True:
            page = self._dao.query.filter(**filters).order_by("id").offset(offset).limit(_PAGE_SIZE).all()
            yield from page.items
            if len(page.items) < _PAGE_SIZE:
                return
            offset += _PAGE_SIZE

    def find_by_owner(self, owner_id) -> list[Store]:
        return list(self._iter_pages(owner_id=str(owner_id)))

    def owner_has_store_named(self, owner_id, name: str, exclude_store_id=None) -> bool:
        wanted = name.strip().lower()
        return any(
            store.name.strip().lower() == wanted
            for store in self.find_by_owner(owner_id)
            if exclude_store_id is None or str(store.id) != str(exclude_store_id)
        )

    def iter_ids(self) -> Iterator[str]:
        """Yield every store id, one page at a time."""
        for store in self._iter_pages():
            yield str(store.id)

    # -------------------------------------------------------------------
    # Browsing
    # -------------------------------------------------------------------
    def search(
        self,
        category: str | None = None,
        text: str | None = None,
        is_verified: bool | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> StorePage:
        """Browse stores, best rated first, newest first among equals.

        ``category`` is matched case-insensitively against the category
        value. ``text`` is a case-insensitive substring of the name or the
        description.
        """
        filters = {}
        if category:
            filters["category"] = category.strip().lower()
        if is_verified is not None:
            filters["is_verified"] = is_verified

        stores = self._iter_pages(**filters)
        if text and text.strip():
            needle = text.strip().lower()
            stores = (store for store in stores if _mentions(store, needle))

        return _paginate(_best_rated_first(stores), offset, limit)

    def list_by_category(self, category: str, offset: int = 0, limit: int = 10) -> StorePage:
        return self.search(category=category, offset=offset, limit=limit)

    def list_by_owner(self, owner_id, offset: int = 0, limit: int = 10) -> StorePage:
        """An owner's stores, newest first."""
        return _paginate(_newest_first(self.find_by_owner(owner_id)), offset, limit)
