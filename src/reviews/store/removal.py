"""RemoveStore — the owner (or an admin) deletes a store.

The store's reviews go with it, in any status, so no review is left
pointing at a store that no longer exists.
"""

import structlog
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.access import is_admin, require
from reviews.domain import reviews
from reviews.review.review import Review
from reviews.store.store import Store

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Store")
class RemoveStore:
    store_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)


@reviews.command_handler(part_of=Store)
class RemoveStoreHandler:
    @handle(RemoveStore)
    def remove_store(self, command):
        repo = current_domain.repository_for(Store)
        store = repo.get_store(command.store_id)

        require(
            store.is_owned_by(command.actor_id) or is_admin(command.actor_role),
            "You can only delete your own stores",
        )

        removed_reviews = current_domain.repository_for(Review).delete_by_store(store.id)
        repo.remove(store.id)

        logger.info(
            "store_removed",
            store_id=str(store.id),
            removed_by=str(command.actor_id),
            removed_reviews=removed_reviews,
        )
