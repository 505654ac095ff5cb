"""PostReply / RemoveReply — the store's answer to a review.

Only the owner of the reviewed store, or an admin, may reply. A review
holds at most one reply; posting again replaces it.
"""

import structlog
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.access import is_admin, require
from reviews.domain import reviews
from reviews.review.review import Review
from reviews.store.store import Store

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class PostReply:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    text = Text()


@reviews.command(part_of="Review")
class RemoveReply:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)


def _require_store_owner_or_admin(review, actor_id, actor_role):
    store = current_domain.repository_for(Store).get_store(review.store_id)
    require(
        store.is_owned_by(actor_id) or is_admin(actor_role),
        "Only the store owner can reply to reviews",
    )


@reviews.command_handler(part_of=Review)
class ReplyHandler:
    @handle(PostReply)
    def post_reply(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)
        _require_store_owner_or_admin(review, command.actor_id, command.actor_role)

        review.post_reply(author_id=command.actor_id, text=command.text)
        repo.update(review)

        logger.info("reply_posted", review_id=str(review.id), author_id=str(command.actor_id))
        return review.to_dict()

    @handle(RemoveReply)
    def remove_reply(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)
        _require_store_owner_or_admin(review, command.actor_id, command.actor_role)

        review.remove_reply()
        repo.update(review)

        logger.info("reply_removed", review_id=str(review.id))
        return review.to_dict()
