"""Moderation state machine for reviews.

States::

    PENDING  --flag-->    FLAGGED
    APPROVED --flag-->    FLAGGED
    FLAGGED  --unflag-->  APPROVED   (admin)
    PENDING  --approve--> APPROVED   (admin)
    FLAGGED  --approve--> APPROVED   (admin)
    PENDING | FLAGGED | APPROVED --reject--> REJECTED   (admin)

Only APPROVED reviews count toward a store's rating. A verb whose target
is the current state is a no-op; any other transition outside the table
is invalid.
"""

from enum import Enum
from typing import NamedTuple

from reviews.access import require_admin
from reviews.errors import InvalidTransition


class ReviewStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    FLAGGED = "Flagged"
    REJECTED = "Rejected"


class ModerationAction(Enum):
    FLAG = "flag"
    UNFLAG = "unflag"
    APPROVE = "approve"
    REJECT = "reject"


class Transition(NamedTuple):
    sources: frozenset
    target: ReviewStatus
    admin_only: bool


TRANSITIONS = {
    ModerationAction.FLAG: Transition(
        sources=frozenset({ReviewStatus.PENDING, ReviewStatus.APPROVED}),
        target=ReviewStatus.FLAGGED,
        admin_only=False,
    ),
    ModerationAction.UNFLAG: Transition(
        sources=frozenset({ReviewStatus.FLAGGED}),
        target=ReviewStatus.APPROVED,
        admin_only=True,
    ),
    ModerationAction.APPROVE: Transition(
        sources=frozenset({ReviewStatus.PENDING, ReviewStatus.FLAGGED}),
        target=ReviewStatus.APPROVED,
        admin_only=True,
    ),
    ModerationAction.REJECT: Transition(
        sources=frozenset({ReviewStatus.PENDING, ReviewStatus.FLAGGED, ReviewStatus.APPROVED}),
        target=ReviewStatus.REJECTED,
        admin_only=True,
    ),
}


def next_status(current: ReviewStatus, action: ModerationAction, actor_role=None) -> ReviewStatus | None:
    """Return the status ``action`` leads to, or None when it is a no-op.

    Raises ``ForbiddenError`` when the action needs an admin and
    ``InvalidTransition`` when it is not allowed from ``current``.
    """
    transition = TRANSITIONS[action]

    if transition.admin_only:
        require_admin(actor_role, f"{action.value} reviews")

    if current == transition.target:
        return None

    if current not in transition.sources:
        raise InvalidTransition(
            {"status": [f"Cannot {action.value} a review in {current.value} status"]}
        )

    return transition.target
