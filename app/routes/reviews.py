"""
reviews.py — Customer review routes.

Routes:
  GET  /reviews             — newest reviews first (max 100), optional ?location_id=
  POST /reviews             — submit a review (rating 1–5), rate limited per IP

Validation happens in ReviewCreate: a missing location_id or a rating
outside 1–5 is rejected with 422 before anything touches the database.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.config import settings
from app.core.rate_limit import limiter
from app.models.review import ReviewCreate, ReviewCreated, ReviewListResponse
from app.services.store import CommerceStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("", response_model=ReviewListResponse)
async def list_reviews(
    location_id: Optional[str] = Query(default=None, description="Only reviews for this location"),
    store: CommerceStore = Depends(get_store),
):
    """Return the most recent reviews, newest first."""
    rows = await store.list_reviews(location_id=location_id, limit=settings.reviews_list_limit)
    return ReviewListResponse(count=len(rows), rows=rows)


@router.post("", response_model=ReviewCreated, status_code=201)
@limiter.limit(settings.review_write_rate_limit)
async def create_review(
    request: Request,
    payload: ReviewCreate,
    store: CommerceStore = Depends(get_store),
):
    """Store a new review and return it with its id and timestamp."""
    row = await store.insert_review(payload)
    return ReviewCreated(row=row)
