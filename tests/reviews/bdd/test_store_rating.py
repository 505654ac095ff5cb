"""BDD tests for store rating aggregation."""

from protean import current_domain
from pytest_bdd import parsers, scenarios, then, when
from reviews.review.editing import EditReview
from reviews.review.removal import RemoveReview
from reviews.review.review import Review
from reviews.store.store import Store

scenarios("features/store_rating.feature")


def _review_of(store_id, user_id):
    return current_domain.repository_for(Review).find_by_user_and_store(user_id, store_id)


@when(parsers.cfparse('the review by "{user_id}" is removed by its author'))
def author_removes_review(store_id, user_id):
    review = _review_of(store_id, user_id)
    current_domain.process(
        RemoveReview(review_id=str(review.id), actor_id=user_id, actor_role="customer"),
        asynchronous=False,
    )


@when(parsers.cfparse('user "{user_id}" changes the rating to {rating:d}'))
def author_changes_rating(store_id, user_id, rating):
    review = _review_of(store_id, user_id)
    current_domain.process(
        EditReview(review_id=str(review.id), actor_id=user_id, rating=rating),
        asynchronous=False,
    )


@then(parsers.cfparse("the store distribution shows {five:d} five-star and {four:d} four-star reviews"))
def distribution_shows(store_id, five, four):
    distribution = current_domain.repository_for(Store).get(store_id).distribution
    assert distribution["5"] == five
    assert distribution["4"] == four
