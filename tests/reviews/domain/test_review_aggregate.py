"""Tests for Review.submit — validation, initial status and events."""

import json

import pytest
from protean.exceptions import ValidationError
from reviews.errors import InvalidInput, InvalidRating
from reviews.review.events import ReviewSubmitted
from reviews.review.review import Review, user_store_key
from reviews.review.state_machine import ReviewStatus


def _make_review(**overrides):
    defaults = {
        "user_id": "user-001",
        "store_id": "store-001",
        "rating": 4,
        "title": "Friendly staff",
        "comment": "Quick service and a clean shop.",
    }
    defaults.update(overrides)
    return Review.submit(**defaults)


class TestSubmitDefaults:
    def test_auto_approved_review_counts_immediately(self):
        review = _make_review()
        assert review.status == ReviewStatus.APPROVED.value
        assert review.is_approved is True
        assert review.is_flagged is False

    def test_pre_moderated_review_starts_pending(self):
        review = _make_review(auto_approve=False)
        assert review.status == ReviewStatus.PENDING.value
        assert review.is_approved is False

    def test_counters_start_at_zero(self):
        review = _make_review()
        assert review.helpful_votes == 0
        assert review.revision == 0
        assert review.reply is None

    def test_user_store_key_combines_both_ids(self):
        review = _make_review(user_id="u-9", store_id="s-3")
        assert review.user_store_key == user_store_key("u-9", "s-3") == "u-9:s-3"

    def test_title_and_comment_are_optional(self):
        review = _make_review(title=None, comment=None)
        assert review.title is None
        assert review.comment is None

    def test_verified_purchase_flag_is_kept(self):
        review = _make_review(is_verified_purchase=True)
        assert review.is_verified_purchase is True

    def test_timestamps_are_set(self):
        review = _make_review()
        assert review.created_at is not None
        assert review.updated_at is not None


class TestSubmitRatingValidation:
    @pytest.mark.parametrize("rating", [1, 3, 5])
    def test_ratings_in_range_are_accepted(self, rating):
        assert _make_review(rating=rating).rating == rating

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_ratings_out_of_range_are_rejected(self, rating):
        with pytest.raises(InvalidRating):
            _make_review(rating=rating)

    def test_invalid_rating_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            _make_review(rating=7)
        assert "rating" in exc.value.messages


class TestSubmitContentValidation:
    def test_title_over_200_characters_rejected(self):
        with pytest.raises(InvalidInput) as exc:
            _make_review(title="x" * 201)
        assert "title" in exc.value.messages

    def test_title_of_200_characters_accepted(self):
        assert len(_make_review(title="x" * 200).title) == 200

    def test_comment_over_2000_characters_rejected(self):
        with pytest.raises(InvalidInput) as exc:
            _make_review(comment="x" * 2001)
        assert "comment" in exc.value.messages

    def test_up_to_five_images_accepted(self):
        images = [f"https://cdn.example.com/{i}.jpg" for i in range(5)]
        review = _make_review(images=images)
        assert review.image_urls == images
        assert json.loads(review.images) == images

    def test_six_images_rejected(self):
        images = [f"https://cdn.example.com/{i}.jpg" for i in range(6)]
        with pytest.raises(InvalidInput) as exc:
            _make_review(images=images)
        assert "images" in exc.value.messages

    @pytest.mark.parametrize("url", ["/relative/path.jpg", "ftp://cdn.example.com/a.jpg", "not a url"])
    def test_non_http_image_urls_rejected(self, url):
        with pytest.raises(InvalidInput):
            _make_review(images=[url])

    def test_no_images_means_empty_list(self):
        assert _make_review().image_urls == []


class TestSubmitEvents:
    def test_submit_raises_review_submitted(self):
        review = _make_review(images=["https://cdn.example.com/a.jpg"])
        assert len(review._events) == 1
        event = review._events[0]
        assert isinstance(event, ReviewSubmitted)
        assert str(event.review_id) == str(review.id)
        assert str(event.store_id) == "store-001"
        assert event.rating == 4
        assert event.status == ReviewStatus.APPROVED.value
        assert event.image_count == 1

    def test_pending_review_event_carries_pending_status(self):
        review = _make_review(auto_approve=False)
        assert review._events[0].status == ReviewStatus.PENDING.value


class TestReviewInvariants:
    def test_flagged_status_requires_reason(self):
        review = _make_review()
        with pytest.raises(ValidationError):
            review.is_flagged = True

    def test_approval_must_match_status(self):
        review = _make_review(auto_approve=False)
        with pytest.raises(ValidationError):
            review.is_approved = True


class TestAuthorship:
    def test_is_authored_by_compares_ids(self):
        review = _make_review(user_id="user-abc")
        assert review.is_authored_by("user-abc") is True
        assert review.is_authored_by("user-xyz") is False
