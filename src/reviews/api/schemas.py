"""Pydantic request/response schemas for the Reviews API.

These are separate from Protean commands (anti-corruption pattern).
The API layer is the external contract; commands are internal domain concepts.
Range checks on ratings and text lengths are left to the domain so that
they surface as the domain's own validation errors.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas: stores
# ---------------------------------------------------------------------------
class RegisterStoreRequest(BaseModel):
    name: str
    category: str
    description: str | None = None
    slug: str | None = None


class UpdateStoreRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    slug: str | None = None
    is_verified: bool | None = None


# ---------------------------------------------------------------------------
# Request Schemas: reviews
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    store_id: str
    rating: int
    title: str | None = None
    comment: str | None = None
    images: list[str] | None = None


class EditReviewRequest(BaseModel):
    rating: int | None = None
    title: str | None = None
    comment: str | None = None
    images: list[str] | None = None


class ReplyRequest(BaseModel):
    text: str


class FlagReviewRequest(BaseModel):
    reason: str | None = None


class RejectReviewRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class StoreIdResponse(BaseModel):
    store_id: str
    slug: str


class ReviewIdResponse(BaseModel):
    review_id: str
    status: str


class ReviewStatusResponse(BaseModel):
    review_id: str
    status: str


class HelpfulVotesResponse(BaseModel):
    review_id: str
    helpful_votes: int


class RatingResponse(BaseModel):
    store_id: str
    average_rating: float
    total_reviews: int
    rating_distribution: dict[str, int] = Field(default_factory=dict)


class StoreResponse(RatingResponse):
    owner_id: str
    name: str
    slug: str
    category: str
    description: str | None = None
    is_active: bool
    is_verified: bool


class ReviewResponse(BaseModel):
    review_id: str
    store_id: str
    user_id: str
    rating: int
    title: str | None = None
    comment: str | None = None
    images: list[str] = Field(default_factory=list)
    helpful_votes: int = 0
    reply_text: str | None = None
    is_verified_purchase: bool = False
    status: str


class StorePageResponse(BaseModel):
    items: list[StoreResponse]
    total: int
    offset: int
    limit: int
