"""FastAPI routes for the Store Reviews & Ratings bounded context.

Each route translates between Pydantic schemas (external contract) and
Protean commands (internal domain concepts). The authenticated actor is
supplied by the gateway in the ``X-Actor-Id`` / ``X-Actor-Role`` headers.
"""

import json
from typing import Annotated

from fastapi import APIRouter, Header, Query
from protean.utils.globals import current_domain

from reviews.access import ActorRole, require, require_admin
from reviews.api.schemas import (
    EditReviewRequest,
    FlagReviewRequest,
    HelpfulVotesResponse,
    RatingResponse,
    RegisterStoreRequest,
    RejectReviewRequest,
    ReplyRequest,
    ReviewIdResponse,
    ReviewResponse,
    ReviewStatusResponse,
    StatusResponse,
    StoreIdResponse,
    StorePageResponse,
    StoreResponse,
    SubmitReviewRequest,
    UpdateStoreRequest,
)
from reviews.review.editing import EditReview
from reviews.review.moderation import ApproveReview, FlagReview, RejectReview, UnflagReview
from reviews.review.reconciliation import RecomputeStoreRating
from reviews.review.removal import RemoveReview
from reviews.review.reply import PostReply, RemoveReply
from reviews.review.review import Review, validate_rating
from reviews.review.submission import SubmitReview
from reviews.review.voting import RetractVote, VoteOnReview
from reviews.store.details import UpdateStoreDetails
from reviews.store.registration import RegisterStore
from reviews.store.removal import RemoveStore
from reviews.store.repository import StorePage
from reviews.store.store import Store

store_router = APIRouter(prefix="/stores", tags=["stores"])
review_router = APIRouter(prefix="/reviews", tags=["reviews"])

ActorIdHeader = Annotated[str, Header(alias="X-Actor-Id")]
ActorRoleHeader = Annotated[str, Header(alias="X-Actor-Role")]


def _review_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        review_id=str(review.id),
        store_id=str(review.store_id),
        user_id=str(review.user_id),
        rating=review.rating,
        title=review.title,
        comment=review.comment,
        images=review.image_urls,
        helpful_votes=review.helpful_votes or 0,
        reply_text=review.reply.text if review.reply else None,
        is_verified_purchase=bool(review.is_verified_purchase),
        status=review.status,
    )


def _store_response(store: Store) -> StoreResponse:
    return StoreResponse(
        store_id=str(store.id),
        owner_id=str(store.owner_id),
        name=store.name,
        slug=store.slug,
        category=store.category,
        description=store.description,
        is_active=bool(store.is_active),
        is_verified=bool(store.is_verified),
        average_rating=store.average_rating or 0.0,
        total_reviews=store.total_reviews or 0,
        rating_distribution=store.distribution,
    )


def _store_page_response(page: StorePage, offset: int, limit: int) -> StorePageResponse:
    return StorePageResponse(
        items=[_store_response(store) for store in page.items], total=page.total, offset=offset, limit=limit
    )


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------
@store_router.post("", status_code=201, response_model=StoreIdResponse)
async def register_store(
    body: RegisterStoreRequest, actor_id: ActorIdHeader, actor_role: ActorRoleHeader
) -> StoreIdResponse:
    """Register a new store owned by the calling actor."""
    command = RegisterStore(
        owner_id=actor_id,
        actor_role=actor_role,
        name=body.name,
        category=body.category,
        description=body.description,
        slug=body.slug,
    )
    store = current_domain.process(command, asynchronous=False)
    return StoreIdResponse(store_id=str(store["id"]), slug=store["slug"])


@store_router.patch("/{store_id}", response_model=StoreIdResponse)
async def update_store(
    store_id: str, body: UpdateStoreRequest, actor_id: ActorIdHeader, actor_role: ActorRoleHeader
) -> StoreIdResponse:
    """Update store details; renaming regenerates the slug."""
    command = UpdateStoreDetails(
        store_id=store_id,
        actor_id=actor_id,
        actor_role=actor_role,
        name=body.name,
        description=body.description,
        category=body.category,
        slug=body.slug,
        is_verified=body.is_verified,
    )
    store = current_domain.process(command, asynchronous=False)
    return StoreIdResponse(store_id=str(store["id"]), slug=store["slug"])


@store_router.delete("/{store_id}", status_code=204)
async def remove_store(store_id: str, actor_id: ActorIdHeader, actor_role: ActorRoleHeader) -> None:
    """Delete a store and its reviews (owner or admin)."""
    command = RemoveStore(store_id=store_id, actor_id=actor_id, actor_role=actor_role)
    current_domain.process(command, asynchronous=False)


# Browse routes are declared before ``/{store_id}`` so their paths win.
@store_router.get("", response_model=StorePageResponse)
async def browse_stores(
    category: str | None = None,
    search: str | None = None,
    is_verified: bool | None = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> StorePageResponse:
    """Browse and search stores, best rated first."""
    page = current_domain.repository_for(Store).search(
        category=category, text=search, is_verified=is_verified, offset=offset, limit=limit
    )
    return _store_page_response(page, offset, limit)


@store_router.get("/mine", response_model=StorePageResponse)
async def list_my_stores(
    actor_id: ActorIdHeader,
    actor_role: ActorRoleHeader,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> StorePageResponse:
    require(
        actor_role in (ActorRole.STORE_OWNER.value, ActorRole.ADMIN.value),
        "Store owner or admin role required",
    )
    page = current_domain.repository_for(Store).list_by_owner(actor_id, offset=offset, limit=limit)
    return _store_page_response(page, offset, limit)


@store_router.get("/category/{category}", response_model=StorePageResponse)
async def list_stores_in_category(
    category: str,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> StorePageResponse:
    page = current_domain.repository_for(Store).list_by_category(category, offset=offset, limit=limit)
    return _store_page_response(page, offset, limit)


@store_router.get("/owner/{owner_id}", response_model=StorePageResponse)
async def list_stores_of_owner(
    owner_id: str,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> StorePageResponse:
    page = current_domain.repository_for(Store).list_by_owner(owner_id, offset=offset, limit=limit)
    return _store_page_response(page, offset, limit)


@store_router.get("/{store_id}", response_model=StoreResponse)
async def get_store(store_id: str) -> StoreResponse:
    """Store details including its rating summary."""
    return _store_response(current_domain.repository_for(Store).get_store(store_id))


@store_router.get("/{store_id}/reviews", response_model=list[ReviewResponse])
async def list_store_reviews(
    store_id: str,
    rating: int | None = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[ReviewResponse]:
    """Approved reviews of a store, newest first, optionally only those with ``rating`` stars."""
    current_domain.repository_for(Store).get_store(store_id)
    repo = current_domain.repository_for(Review)
    if rating is None:
        reviews_page = repo.list_by_store(store_id, offset=offset, limit=limit)
    else:
        reviews_page = repo.list_by_rating(validate_rating(rating), store_id=store_id, offset=offset, limit=limit)
    return [_review_response(review) for review in reviews_page]


@store_router.post("/{store_id}/rating/recompute", response_model=RatingResponse)
async def recompute_store_rating(store_id: str, actor_role: ActorRoleHeader) -> RatingResponse:
    """Rescan a store's approved reviews and rewrite its rating fields (admin)."""
    command = RecomputeStoreRating(store_id=store_id, actor_role=actor_role)
    stats = current_domain.process(command, asynchronous=False)
    return RatingResponse(store_id=store_id, **stats)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def submit_review(body: SubmitReviewRequest, actor_id: ActorIdHeader) -> ReviewIdResponse:
    """Rate a store."""
    command = SubmitReview(
        user_id=actor_id,
        store_id=body.store_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=json.dumps(body.images) if body.images is not None else None,
    )
    review = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=str(review["id"]), status=review["status"])


@review_router.get("", response_model=list[ReviewResponse])
async def list_user_reviews(user_id: Annotated[str, Query()]) -> list[ReviewResponse]:
    """Every review written by a user, in any status."""
    return [_review_response(review) for review in current_domain.repository_for(Review).list_by_user(user_id)]


@review_router.get("/moderation/pending", response_model=list[ReviewResponse])
async def list_pending_reviews(actor_role: ActorRoleHeader) -> list[ReviewResponse]:
    """Moderation queue of reviews awaiting approval (admin)."""
    require_admin(actor_role, "view the moderation queue")
    return [_review_response(review) for review in current_domain.repository_for(Review).list_pending()]


@review_router.get("/moderation/flagged", response_model=list[ReviewResponse])
async def list_flagged_reviews(actor_role: ActorRoleHeader) -> list[ReviewResponse]:
    require_admin(actor_role, "view the moderation queue")
    return [_review_response(review) for review in current_domain.repository_for(Review).list_flagged()]


@review_router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(review_id: str) -> ReviewResponse:
    review = current_domain.repository_for(Review).get_review(review_id)
    return _review_response(review)


@review_router.patch("/{review_id}", response_model=StatusResponse)
async def edit_review(review_id: str, body: EditReviewRequest, actor_id: ActorIdHeader) -> StatusResponse:
    """Edit your own review."""
    command = EditReview(
        review_id=review_id,
        actor_id=actor_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=json.dumps(body.images) if body.images is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.delete("/{review_id}", status_code=204)
async def remove_review(review_id: str, actor_id: ActorIdHeader, actor_role: ActorRoleHeader) -> None:
    """Remove a review (author or admin)."""
    command = RemoveReview(review_id=review_id, actor_id=actor_id, actor_role=actor_role)
    current_domain.process(command, asynchronous=False)


@review_router.put("/{review_id}/reply", response_model=StatusResponse)
async def post_reply(
    review_id: str, body: ReplyRequest, actor_id: ActorIdHeader, actor_role: ActorRoleHeader
) -> StatusResponse:
    """Reply to a review as the store owner; replaces any earlier reply."""
    command = PostReply(review_id=review_id, actor_id=actor_id, actor_role=actor_role, text=body.text)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.delete("/{review_id}/reply", response_model=StatusResponse)
async def remove_reply(review_id: str, actor_id: ActorIdHeader, actor_role: ActorRoleHeader) -> StatusResponse:
    command = RemoveReply(review_id=review_id, actor_id=actor_id, actor_role=actor_role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post("/{review_id}/helpful", response_model=HelpfulVotesResponse)
async def vote_helpful(review_id: str, actor_id: ActorIdHeader) -> HelpfulVotesResponse:
    """Mark a review as helpful."""
    votes = current_domain.process(VoteOnReview(review_id=review_id, actor_id=actor_id), asynchronous=False)
    return HelpfulVotesResponse(review_id=review_id, helpful_votes=votes)


@review_router.delete("/{review_id}/helpful", response_model=HelpfulVotesResponse)
async def retract_helpful_vote(review_id: str, actor_id: ActorIdHeader) -> HelpfulVotesResponse:
    votes = current_domain.process(RetractVote(review_id=review_id, actor_id=actor_id), asynchronous=False)
    return HelpfulVotesResponse(review_id=review_id, helpful_votes=votes)


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------
@review_router.post("/{review_id}/flag", response_model=ReviewStatusResponse)
async def flag_review(review_id: str, body: FlagReviewRequest, actor_id: ActorIdHeader) -> ReviewStatusResponse:
    """Flag a review for moderation."""
    command = FlagReview(review_id=review_id, reason=body.reason, actor_id=actor_id)
    review = current_domain.process(command, asynchronous=False)
    return ReviewStatusResponse(review_id=review_id, status=review["status"])


@review_router.post("/{review_id}/unflag", response_model=ReviewStatusResponse)
async def unflag_review(review_id: str, actor_id: ActorIdHeader, actor_role: ActorRoleHeader) -> ReviewStatusResponse:
    command = UnflagReview(review_id=review_id, actor_id=actor_id, actor_role=actor_role)
    review = current_domain.process(command, asynchronous=False)
    return ReviewStatusResponse(review_id=review_id, status=review["status"])


@review_router.post("/{review_id}/approve", response_model=ReviewStatusResponse)
async def approve_review(review_id: str, actor_id: ActorIdHeader, actor_role: ActorRoleHeader) -> ReviewStatusResponse:
    command = ApproveReview(review_id=review_id, actor_id=actor_id, actor_role=actor_role)
    review = current_domain.process(command, asynchronous=False)
    return ReviewStatusResponse(review_id=review_id, status=review["status"])


@review_router.post("/{review_id}/reject", response_model=ReviewStatusResponse)
async def reject_review(
    review_id: str, body: RejectReviewRequest, actor_id: ActorIdHeader, actor_role: ActorRoleHeader
) -> ReviewStatusResponse:
    command = RejectReview(review_id=review_id, actor_id=actor_id, actor_role=actor_role, reason=body.reason)
    review = current_domain.process(command, asynchronous=False)
    return ReviewStatusResponse(review_id=review_id, status=review["status"])
