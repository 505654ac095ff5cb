"""RecomputeStoreRating — admin-triggered rescan of a store's rating."""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.access import require_admin
from reviews.domain import reviews
from reviews.review.aggregation import RatingAggregator
from reviews.store.store import Store


@reviews.command(part_of="Store")
class RecomputeStoreRating:
    store_id = Identifier(required=True)
    actor_role = String(required=True)


@reviews.command_handler(part_of=Store)
class RecomputeStoreRatingHandler:
    @handle(RecomputeStoreRating)
    def recompute_store_rating(self, command):
        require_admin(command.actor_role, "recompute store ratings")
        current_domain.repository_for(Store).get_store(command.store_id)
        return RatingAggregator().recompute(command.store_id).to_dict()
