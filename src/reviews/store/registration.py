"""RegisterStore — a store owner (or an admin) registers a new store.

The slug is generated from the name unless one is supplied explicitly.
"""

import structlog
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.access import ActorRole, require
from reviews.domain import reviews
from reviews.errors import DuplicateSlug, DuplicateStore, InvalidInput
from reviews.store.slug import generate_slug, is_valid_slug
from reviews.store.store import Store

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Store")
class RegisterStore:
    owner_id = Identifier(required=True)
    actor_role = String(required=True)
    name = String(required=True, max_length=200)
    category = String(required=True)
    description = Text()
    slug = String(max_length=255)


def resolve_explicit_slug(repo, slug, exclude_store_id=None) -> str:
    """Validate a caller-supplied slug against the pattern and existing stores."""
    if not is_valid_slug(slug):
        raise InvalidInput({"slug": ["Slug can only contain lowercase letters, numbers, and hyphens"]})
    if repo.slug_exists(slug, exclude_store_id=exclude_store_id):
        raise DuplicateSlug(slug)
    return slug


@reviews.command_handler(part_of=Store)
class RegisterStoreHandler:
    @handle(RegisterStore)
    def register_store(self, command):
        require(
            command.actor_role in (ActorRole.STORE_OWNER.value, ActorRole.ADMIN.value),
            "Store owner or admin role required",
        )

        repo = current_domain.repository_for(Store)

        if repo.owner_has_store_named(command.owner_id, command.name):
            raise DuplicateStore(command.name)

        if command.slug:
            slug = resolve_explicit_slug(repo, command.slug)
        else:
            slug = generate_slug(command.name, repo.slug_exists)

        store = Store.register(
            owner_id=command.owner_id,
            name=command.name,
            category=command.category,
            slug=slug,
            description=command.description,
        )
        repo.add(store)

        logger.info("store_registered", store_id=str(store.id), slug=slug)
        return store.to_dict()
