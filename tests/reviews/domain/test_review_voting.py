"""Tests for helpful votes — counter, self-vote guard, floor at zero."""

import pytest
from reviews.errors import SelfVote
from reviews.review.events import HelpfulVoteRecorded, HelpfulVoteRetracted
from reviews.review.review import Review


def _make_review():
    review = Review.submit(user_id="author-1", store_id="store-001", rating=5)
    review._events.clear()
    return review


class TestHelpfulVote:
    def test_vote_increments_by_one(self):
        review = _make_review()
        assert review.add_helpful_vote("voter-1") == 1
        assert review.helpful_votes == 1

    def test_repeat_votes_from_same_user_are_counted(self):
        review = _make_review()
        review.add_helpful_vote("voter-1")
        assert review.add_helpful_vote("voter-1") == 2

    def test_author_cannot_vote_on_own_review(self):
        review = _make_review()
        with pytest.raises(SelfVote):
            review.add_helpful_vote("author-1")
        assert review.helpful_votes == 0

    def test_vote_raises_event(self):
        review = _make_review()
        review.add_helpful_vote("voter-1")
        event = review._events[0]
        assert isinstance(event, HelpfulVoteRecorded)
        assert event.helpful_votes == 1


class TestRetractVote:
    def test_retract_decrements(self):
        review = _make_review()
        review.add_helpful_vote("voter-1")
        review.add_helpful_vote("voter-2")
        assert review.remove_helpful_vote("voter-1") == 1

    def test_retract_never_goes_below_zero(self):
        review = _make_review()
        assert review.remove_helpful_vote("voter-1") == 0
        assert review.helpful_votes == 0
        assert review._events == []

    def test_author_cannot_retract_on_own_review(self):
        review = _make_review()
        with pytest.raises(SelfVote):
            review.remove_helpful_vote("author-1")

    def test_retract_raises_event(self):
        review = _make_review()
        review.add_helpful_vote("voter-1")
        review._events.clear()
        review.remove_helpful_vote("voter-1")
        assert isinstance(review._events[0], HelpfulVoteRetracted)
