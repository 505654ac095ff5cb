"""Runtime settings for the Reviews domain, read from the environment.

Each setting has an override hook for tests, in the same spirit as the
adapter factories in ``reviews.ports``.
"""

import os
from enum import Enum


class ModerationPolicy(Enum):
    AUTO = "auto"  # new reviews count immediately
    PRE = "pre"  # new reviews wait for an admin


_moderation_policy: ModerationPolicy | None = None


def get_moderation_policy() -> ModerationPolicy:
    """Return the moderation policy applied to newly submitted reviews.

    Defaults to ``REVIEW_MODERATION`` from the environment, ``auto`` when unset.
    """
    if _moderation_policy is not None:
        return _moderation_policy

    value = os.environ.get("REVIEW_MODERATION", ModerationPolicy.AUTO.value).strip().lower()
    try:
        return ModerationPolicy(value)
    except ValueError:
        raise ValueError(f"Unknown review moderation policy: {value}") from None


def set_moderation_policy(policy: ModerationPolicy) -> None:
    """Override the moderation policy (useful for tests)."""
    global _moderation_policy
    _moderation_policy = policy


def reset_moderation_policy() -> None:
    """Fall back to the environment setting."""
    global _moderation_policy
    _moderation_policy = None


def get_moderation_recipient() -> str:
    """Recipient id of the moderation team, alerted on flagged reviews (``MODERATION_RECIPIENT``)."""
    return os.environ.get("MODERATION_RECIPIENT", "moderation-team")
