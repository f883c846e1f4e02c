"""
review.py — Pydantic schemas for customer reviews.

ReviewCreate       — what the client sends to POST /reviews
ReviewOut          — a stored review as returned by the API
ReviewListResponse — GET /reviews envelope
ReviewCreated      — POST /reviews envelope
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Payload for POST /reviews. Ratings outside 1–5 never reach the store."""

    # Some clients send numeric ids; store them as strings like every other id.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    location_id: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    review_text: Optional[str] = Field(default=None, max_length=5000)


class ReviewOut(BaseModel):
    id: str
    location_id: str
    rating: int
    review_text: Optional[str] = None
    created_at: datetime


class ReviewListResponse(BaseModel):
    ok: bool = True
    count: int
    rows: list[ReviewOut]


class ReviewCreated(BaseModel):
    ok: bool = True
    row: ReviewOut
