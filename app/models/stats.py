"""
stats.py — Pydantic models for the rating analytics.

Core shapes (consumed and produced by app/services/analytics.py):
  TimeWindow        — inclusive [start, end] used to filter reviews
  GroupedReview     — one review row tagged with its grouping key (city)
  AggregateRow      — per-group {count, average} produced by aggregate_by_group()
  LocationStatsRow  — raw row from the v_location_30d view (fields may be missing)
  LocationSummary   — normalized per-location 30-day summary

Response envelopes (presentation layer):
  LocationStatsResponse — GET /stats/location/{id}
  BrandHeatmapResponse  — GET /stats/brand/{brand_id}/heatmap
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Core ──────────────────────────────────────────────────────────────────────

class TimeWindow(BaseModel):
    """Inclusive on both ends. start > end is legal and simply matches nothing."""

    start: datetime
    end: datetime


class GroupedReview(BaseModel):
    rating: int                       # trusted 1–5, validated on write
    created_at: datetime
    group_key: Optional[str] = None   # None → counted under the fallback label


class AggregateRow(BaseModel):
    group_key: str
    review_count: int = Field(ge=0)
    average_rating: Decimal           # quantized to 0.01


class LocationStatsRow(BaseModel):
    """A v_location_30d document. Sub-fields are optional; defaults are applied
    by summarize_location(), nowhere else."""

    model_config = ConfigDict(extra="ignore")

    location_id: str
    reviews_30d: Optional[int] = None
    avg_rating_30d: Optional[float] = None


class LocationSummary(BaseModel):
    location_id: str
    review_count: int = 0
    average_rating: Optional[float] = None


# ── Responses ─────────────────────────────────────────────────────────────────

class LocationStatsResponse(BaseModel):
    ok: bool = True
    location_id: str
    reviews_30d: int
    avg_rating_30d: Optional[float] = None


class CityHeatmapRow(BaseModel):
    city: str
    reviews: int
    avg_rating: float


class WindowOut(BaseModel):
    """Resolved window echoed back so callers can see which defaults applied."""

    model_config = ConfigDict(populate_by_name=True)

    from_: datetime = Field(alias="from")
    to: datetime


class BrandHeatmapResponse(BaseModel):
    ok: bool = True
    rows: list[CityHeatmapRow]
    window: WindowOut
