"""VoteOnReview / RetractVote — helpful votes on a review.

Authors cannot vote on their own review. Votes are a bare counter with no
per-voter record, so repeat votes are counted.
"""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review


@reviews.command(part_of="Review")
class VoteOnReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)


@reviews.command(part_of="Review")
class RetractVote:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)


@reviews.command_handler(part_of=Review)
class VotingHandler:
    @handle(VoteOnReview)
    def vote_on_review(self, command) -> int:
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)

        votes = review.add_helpful_vote(command.actor_id)
        repo.update(review)
        return votes

    @handle(RetractVote)
    def retract_vote(self, command) -> int:
        repo = current_domain.repository_for(Review)
        review = repo.get_review(command.review_id)

        votes = review.remove_helpful_vote(command.actor_id)
        repo.update(review)
        return votes
