"""UpdateStoreDetails — partial update of a store by its owner or an admin.

Renaming a store regenerates its slug unless the same update sets the
slug explicitly. Only admins may change ``is_verified``. Rating fields
are not part of this command.
"""

import structlog
from protean.exceptions import ExpectedVersionError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.access import is_admin, require, require_admin
from reviews.domain import reviews
from reviews.errors import DuplicateStore, StaleWrite
from reviews.store.registration import resolve_explicit_slug
from reviews.store.slug import generate_slug
from reviews.store.store import Store

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Store")
class UpdateStoreDetails:
    store_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    name = String(max_length=200)
    description = Text()
    category = String()
    slug = String(max_length=255)
    is_verified = Boolean()


@reviews.command_handler(part_of=Store)
class UpdateStoreDetailsHandler:
    @handle(UpdateStoreDetails)
    def update_store_details(self, command):
        repo = current_domain.repository_for(Store)
        store = repo.get_store(command.store_id)

        require(
            store.is_owned_by(command.actor_id) or is_admin(command.actor_role),
            "You can only update your own stores",
        )

        kwargs = {}
        if command.name is not None and command.name != store.name:
            if repo.owner_has_store_named(store.owner_id, command.name, exclude_store_id=store.id):
                raise DuplicateStore(command.name)
            kwargs["name"] = command.name
        if command.description is not None:
            kwargs["description"] = command.description
        if command.category is not None:
            kwargs["category"] = command.category
        if command.is_verified is not None:
            require_admin(command.actor_role, "change store verification")
            kwargs["is_verified"] = command.is_verified

        if command.slug is not None:
            if command.slug != store.slug:
                kwargs["slug"] = resolve_explicit_slug(repo, command.slug, exclude_store_id=store.id)
        elif "name" in kwargs:
            kwargs["slug"] = generate_slug(
                kwargs["name"],
                lambda candidate: repo.slug_exists(candidate, exclude_store_id=store.id),
            )

        store.update_details(**kwargs)
        try:
            repo.add(store)
        except ExpectedVersionError as exc:
            raise StaleWrite("Store", store.id) from exc

        logger.info("store_details_updated", store_id=str(store.id), fields=sorted(kwargs))
        return store.to_dict()
