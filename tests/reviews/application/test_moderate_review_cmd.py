"""Application tests for the moderation command handlers."""

import pytest
from protean import current_domain
from reviews.config import ModerationPolicy, set_moderation_policy
from reviews.errors import ForbiddenError, InvalidInput, InvalidTransition
from reviews.review.moderation import ApproveReview, FlagReview, RejectReview, UnflagReview
from reviews.review.review import Review
from reviews.review.state_machine import ReviewStatus
from reviews.review.submission import SubmitReview
from reviews.store.registration import RegisterStore
from reviews.store.store import Store


def _register_store():
    store = current_domain.process(
        RegisterStore(owner_id="owner-001", actor_role="store_owner", name="Joe's Cafe", category="restaurant"),
        asynchronous=False,
    )
    return str(store["id"])


def _submit(store_id, user_id="user-001", rating=4):
    review = current_domain.process(
        SubmitReview(user_id=user_id, store_id=store_id, rating=rating),
        asynchronous=False,
    )
    return str(review["id"])


def _flag(review_id, reason="spam"):
    return current_domain.process(
        FlagReview(review_id=review_id, reason=reason, actor_id="user-002"),
        asynchronous=False,
    )


def _admin(command_cls, review_id, **kwargs):
    return current_domain.process(
        command_cls(review_id=review_id, actor_id="admin-1", actor_role="admin", **kwargs),
        asynchronous=False,
    )


def _store(store_id):
    return current_domain.repository_for(Store).get(store_id)


class TestFlagReview:
    def test_flag_removes_review_from_rating(self):
        store_id = _register_store()
        _submit(store_id, "user-001", 5)
        flagged = _submit(store_id, "user-002", 1)

        result = _flag(flagged)

        assert result["status"] == ReviewStatus.FLAGGED.value
        assert _store(store_id).average_rating == 5.0
        assert _store(store_id).total_reviews == 1

    def test_flag_without_reason_rejected(self):
        store_id = _register_store()
        review_id = _submit(store_id)
        with pytest.raises(InvalidInput):
            _flag(review_id, reason=None)
        assert current_domain.repository_for(Review).get(review_id).status == ReviewStatus.APPROVED.value

    def test_flag_twice_is_a_no_op(self):
        store_id = _register_store()
        review_id = _submit(store_id)
        _flag(review_id, reason="spam")
        result = _flag(review_id, reason="fake")
        assert result["flag_reason"] == "spam"


class TestUnflagReview:
    def test_unflag_restores_rating(self):
        store_id = _register_store()
        review_id = _submit(store_id, rating=3)
        _flag(review_id)
        assert _store(store_id).total_reviews == 0

        _admin(UnflagReview, review_id)

        assert _store(store_id).total_reviews == 1
        assert _store(store_id).average_rating == 3.0

    def test_unflag_requires_admin(self):
        store_id = _register_store()
        review_id = _submit(store_id)
        _flag(review_id)
        with pytest.raises(ForbiddenError):
            current_domain.process(
                UnflagReview(review_id=review_id, actor_id="owner-001", actor_role="store_owner"),
                asynchronous=False,
            )

    def test_unflag_pending_review_is_invalid(self):
        set_moderation_policy(ModerationPolicy.PRE)
        store_id = _register_store()
        review_id = _submit(store_id)
        with pytest.raises(InvalidTransition):
            _admin(UnflagReview, review_id)


class TestApproveReview:
    def test_approve_pending_review_counts_it(self):
        set_moderation_policy(ModerationPolicy.PRE)
        store_id = _register_store()
        review_id = _submit(store_id, rating=4)
        assert _store(store_id).total_reviews == 0

        result = _admin(ApproveReview, review_id)

        assert result["status"] == ReviewStatus.APPROVED.value
        assert str(result["moderated_by"]) == "admin-1"
        assert _store(store_id).total_reviews == 1
        assert _store(store_id).average_rating == 4.0

    def test_approve_requires_admin(self):
        set_moderation_policy(ModerationPolicy.PRE)
        store_id = _register_store()
        review_id = _submit(store_id)
        with pytest.raises(ForbiddenError):
            current_domain.process(
                ApproveReview(review_id=review_id, actor_id="user-001", actor_role="customer"),
                asynchronous=False,
            )

    def test_approving_approved_review_changes_nothing(self):
        store_id = _register_store()
        review_id = _submit(store_id)
        result = _admin(ApproveReview, review_id)
        assert result["status"] == ReviewStatus.APPROVED.value
        assert _store(store_id).total_reviews == 1


class TestRejectReview:
    def test_reject_approved_review_drops_it_from_rating(self):
        store_id = _register_store()
        _submit(store_id, "user-001", 2)
        rejected = _submit(store_id, "user-002", 4)

        _admin(RejectReview, rejected, reason="Off-topic")

        assert _store(store_id).total_reviews == 1
        assert _store(store_id).average_rating == 2.0

    def test_rejected_review_cannot_be_approved(self):
        store_id = _register_store()
        review_id = _submit(store_id)
        _admin(RejectReview, review_id)
        with pytest.raises(InvalidTransition):
            _admin(ApproveReview, review_id)

    def test_rejected_review_cannot_be_flagged(self):
        store_id = _register_store()
        review_id = _submit(store_id)
        _admin(RejectReview, review_id)
        with pytest.raises(InvalidTransition):
            _flag(review_id)
