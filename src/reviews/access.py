"""Actor roles supplied by the authentication collaborator, and guards on them."""

from enum import Enum

from reviews.errors import ForbiddenError


class ActorRole(Enum):
    CUSTOMER = "customer"
    STORE_OWNER = "store_owner"
    ADMIN = "admin"


def is_admin(role) -> bool:
    return role == ActorRole.ADMIN.value


def require_admin(role, action: str) -> None:
    if not is_admin(role):
        raise ForbiddenError({"actor": [f"Only admins can {action}"]})


def require(condition: bool, message: str) -> None:
    if not condition:
        raise ForbiddenError({"actor": [message]})
