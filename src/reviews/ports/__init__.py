"""Collaborator adapters — purchase verification and moderation notifications.

Fake adapters are used by default; real adapters are selected through the
``PURCHASE_VERIFIER`` and ``NOTIFIER_ADAPTER`` environment variables.
"""

import os

from reviews.ports.notifier_port import NotifierPort
from reviews.ports.purchase_port import PurchaseVerifier

_verifier_instance: PurchaseVerifier | None = None
_notifier_instance: NotifierPort | None = None


def get_purchase_verifier() -> PurchaseVerifier:
    """Return the configured purchase verifier (singleton)."""
    global _verifier_instance
    if _verifier_instance is None:
        adapter = os.environ.get("PURCHASE_VERIFIER", "fake")
        if adapter == "fake":
            from reviews.ports.fake_purchases import FakePurchaseVerifier

            _verifier_instance = FakePurchaseVerifier()
        else:
            raise ValueError(f"Unknown purchase verifier: {adapter}")
    return _verifier_instance


def set_purchase_verifier(verifier: PurchaseVerifier) -> None:
    """Override the active purchase verifier (useful for tests)."""
    global _verifier_instance
    _verifier_instance = verifier


def get_notifier() -> NotifierPort:
    """Return the configured notifier (singleton)."""
    global _notifier_instance
    if _notifier_instance is None:
        adapter = os.environ.get("NOTIFIER_ADAPTER", "fake")
        if adapter == "fake":
            from reviews.ports.fake_notifier import FakeNotifier

            _notifier_instance = FakeNotifier()
        else:
            raise ValueError(f"Unknown notifier adapter: {adapter}")
    return _notifier_instance


def set_notifier(notifier: NotifierPort) -> None:
    """Override the active notifier (useful for tests)."""
    global _notifier_instance
    _notifier_instance = notifier


def reset_ports() -> None:
    """Reset adapter singletons (useful for testing)."""
    global _verifier_instance, _notifier_instance
    _verifier_instance = None
    _notifier_instance = None
