"""Application tests for PostReply / RemoveReply command handlers."""

import pytest
from protean import current_domain
from reviews.errors import ForbiddenError, InvalidInput
from reviews.review.reply import PostReply, RemoveReply
from reviews.review.review import Review
from reviews.review.submission import SubmitReview
from reviews.store.registration import RegisterStore


def _setup_review():
    store = current_domain.process(
        RegisterStore(owner_id="owner-001", actor_role="store_owner", name="Joe's Cafe", category="restaurant"),
        asynchronous=False,
    )
    review = current_domain.process(
        SubmitReview(user_id="user-001", store_id=store["id"], rating=3),
        asynchronous=False,
    )
    return str(review["id"])


def _reply(review_id, text="Thanks for visiting!", actor_id="owner-001", actor_role="store_owner"):
    return current_domain.process(
        PostReply(review_id=review_id, actor_id=actor_id, actor_role=actor_role, text=text),
        asynchronous=False,
    )


class TestPostReply:
    def test_store_owner_replies(self):
        review_id = _setup_review()
        _reply(review_id)
        review = current_domain.repository_for(Review).get(review_id)
        assert review.reply.text == "Thanks for visiting!"
        assert str(review.reply.author_id) == "owner-001"

    def test_reply_overwrites_previous(self):
        review_id = _setup_review()
        _reply(review_id, text="First")
        _reply(review_id, text="Second")
        assert current_domain.repository_for(Review).get(review_id).reply.text == "Second"

    def test_admin_may_reply(self):
        review_id = _setup_review()
        _reply(review_id, actor_id="admin-1", actor_role="admin")
        assert current_domain.repository_for(Review).get(review_id).reply is not None

    def test_owner_of_another_store_cannot_reply(self):
        review_id = _setup_review()
        with pytest.raises(ForbiddenError):
            _reply(review_id, actor_id="owner-999")

    def test_review_author_cannot_reply(self):
        review_id = _setup_review()
        with pytest.raises(ForbiddenError):
            _reply(review_id, actor_id="user-001", actor_role="customer")

    def test_empty_reply_rejected(self):
        review_id = _setup_review()
        with pytest.raises(InvalidInput):
            _reply(review_id, text="")

    def test_long_reply_rejected(self):
        review_id = _setup_review()
        with pytest.raises(InvalidInput):
            _reply(review_id, text="x" * 1001)


class TestRemoveReply:
    def test_owner_removes_reply(self):
        review_id = _setup_review()
        _reply(review_id)
        current_domain.process(
            RemoveReply(review_id=review_id, actor_id="owner-001", actor_role="store_owner"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Review).get(review_id).reply is None

    def test_customer_cannot_remove_reply(self):
        review_id = _setup_review()
        _reply(review_id)
        with pytest.raises(ForbiddenError):
            current_domain.process(
                RemoveReply(review_id=review_id, actor_id="user-001", actor_role="customer"),
                asynchronous=False,
            )
