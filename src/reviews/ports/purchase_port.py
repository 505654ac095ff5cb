"""Purchase verification port — answers whether a user bought from a store."""

from abc import ABC, abstractmethod


class PurchaseVerifier(ABC):
    """Abstract interface for order-history lookups."""

    @abstractmethod
    def has_purchased(self, user_id: str, store_id: str) -> bool:
        """Return True if the user has a completed order with the store."""
        ...
