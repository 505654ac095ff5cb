"""Shared BDD fixtures and step definitions for the Reviews domain."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from reviews.config import ModerationPolicy, set_moderation_policy
from reviews.errors import ConflictError, ForbiddenError
from reviews.review.moderation import ApproveReview, FlagReview, RejectReview, UnflagReview
from reviews.review.review import Review
from reviews.review.submission import SubmitReview
from reviews.store.registration import RegisterStore
from reviews.store.store import Store


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


def _review_of(store_id, user_id):
    review = current_domain.repository_for(Review).find_by_user_and_store(user_id, store_id)
    assert review is not None, f"No review by {user_id}"
    return review


def _attempt(error, command):
    try:
        current_domain.process(command, asynchronous=False)
    except (ValidationError, ConflictError, ForbiddenError) as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a registered store "{name}"'), target_fixture="store_id")
def registered_store(name):
    store = current_domain.process(
        RegisterStore(owner_id="owner-bdd", actor_role="store_owner", name=name, category="retail"),
        asynchronous=False,
    )
    return str(store["id"])


@given("reviews are pre-moderated")
def pre_moderated():
    set_moderation_policy(ModerationPolicy.PRE)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('user "{user_id}" rates the store {rating:d}'))
def user_rates_store(store_id, user_id, rating):
    current_domain.process(SubmitReview(user_id=user_id, store_id=store_id, rating=rating), asynchronous=False)


@when(parsers.cfparse('user "{user_id}" tries to rate the store {rating:d}'))
def user_tries_to_rate_store(store_id, user_id, rating, error):
    _attempt(error, SubmitReview(user_id=user_id, store_id=store_id, rating=rating))


@when(parsers.cfparse('the review by "{user_id}" is flagged as "{reason}"'))
def review_is_flagged(store_id, user_id, reason):
    review = _review_of(store_id, user_id)
    current_domain.process(
        FlagReview(review_id=str(review.id), reason=reason, actor_id="flagger-bdd"),
        asynchronous=False,
    )


@when(parsers.cfparse('user "{actor_id}" tries to flag the review by "{user_id}" without a reason'))
def flag_without_reason(store_id, actor_id, user_id, error):
    review = _review_of(store_id, user_id)
    _attempt(error, FlagReview(review_id=str(review.id), actor_id=actor_id))


@when(parsers.cfparse('an admin unflags the review by "{user_id}"'))
def admin_unflags(store_id, user_id):
    review = _review_of(store_id, user_id)
    current_domain.process(
        UnflagReview(review_id=str(review.id), actor_id="admin-bdd", actor_role="admin"),
        asynchronous=False,
    )


@when(parsers.cfparse('an admin approves the review by "{user_id}"'))
def admin_approves(store_id, user_id):
    review = _review_of(store_id, user_id)
    current_domain.process(
        ApproveReview(review_id=str(review.id), actor_id="admin-bdd", actor_role="admin"),
        asynchronous=False,
    )


@when(parsers.cfparse('an admin tries to approve the review by "{user_id}"'))
def admin_tries_to_approve(store_id, user_id, error):
    review = _review_of(store_id, user_id)
    _attempt(error, ApproveReview(review_id=str(review.id), actor_id="admin-bdd", actor_role="admin"))


@when(parsers.cfparse('user "{actor_id}" tries to approve the review by "{user_id}"'))
def customer_tries_to_approve(store_id, actor_id, user_id, error):
    review = _review_of(store_id, user_id)
    _attempt(error, ApproveReview(review_id=str(review.id), actor_id=actor_id, actor_role="customer"))


@when(parsers.cfparse('an admin rejects the review by "{user_id}"'))
def admin_rejects(store_id, user_id):
    review = _review_of(store_id, user_id)
    current_domain.process(
        RejectReview(review_id=str(review.id), actor_id="admin-bdd", actor_role="admin", reason="Off-topic"),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the store rating is {average} over {total:d} reviews"))
def store_rating_is(store_id, average, total):
    store = current_domain.repository_for(Store).get(store_id)
    assert f"{store.average_rating:.2f}" == average
    assert store.total_reviews == total
    assert sum(store.distribution.values()) == total


@then(parsers.cfparse('the review by "{user_id}" is "{status}"'))
def review_status_is(store_id, user_id, status):
    assert _review_of(store_id, user_id).status == status


@then("the action fails with a validation error")
def action_fails_validation(error):
    assert isinstance(error["exc"], ValidationError), f"Expected a validation error, got {error['exc']!r}"


@then("the action fails with a conflict")
def action_fails_conflict(error):
    assert isinstance(error["exc"], ConflictError), f"Expected a conflict, got {error['exc']!r}"


@then("the action is forbidden")
def action_forbidden(error):
    assert isinstance(error["exc"], ForbiddenError), f"Expected a forbidden error, got {error['exc']!r}"
