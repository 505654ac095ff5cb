"""Fake purchase verifier — an in-memory order history for testing."""

from reviews.ports.purchase_port import PurchaseVerifier


class FakePurchaseVerifier(PurchaseVerifier):
    """Purchase verifier backed by an in-memory set of (user, store) pairs."""

    def __init__(self):
        self.purchases: set[tuple[str, str]] = set()
        self.should_succeed = True
        self.failure_reason = "Order history unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Order history unavailable"):
        """Configure the fake verifier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def record_purchase(self, user_id: str, store_id: str) -> None:
        self.purchases.add((str(user_id), str(store_id)))

    def has_purchased(self, user_id: str, store_id: str) -> bool:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)
        return (str(user_id), str(store_id)) in self.purchases

