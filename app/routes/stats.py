"""
stats.py — Rating analytics routes.

Routes:
  GET /stats/location/{location_id}               — trailing 30-day summary
  GET /stats/brand/{brand_id}/heatmap?from=&to=   — per-city ratings for a brand

HOW THE DATA FLOWS
──────────────────
1. resolve_window() turns ?from= / ?to= into an inclusive UTC window
   (default: the 30 days ending now). A malformed date → 422.
2. CommerceStore fetches the already-filtered rows from MongoDB.
3. analytics.py reduces them (summarize_location / aggregate_by_group).
4. This module shapes the response. Heatmap rows are sorted by city here;
   the aggregator itself makes no ordering promise.

A location with no reviews in the last 30 days is not a 404: it reports
reviews_30d=0 and avg_rating_30d=null.

Manual test with curl:
  curl http://localhost:8000/stats/location/loc_001
  curl "http://localhost:8000/stats/brand/brand_a/heatmap?from=2026-01-01&to=2026-01-31"
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.config import settings
from app.models.stats import BrandHeatmapResponse, CityHeatmapRow, LocationStatsResponse, WindowOut
from app.services.analytics import aggregate_by_group, summarize_location
from app.services.store import CommerceStore, get_store
from app.services.windows import InvalidWindowBoundary, resolve_window

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/location/{location_id}", response_model=LocationStatsResponse)
async def location_stats(location_id: str, store: CommerceStore = Depends(get_store)):
    """Review count and average rating for one location over the last 30 days."""
    summary = summarize_location(location_id, await store.fetch_location_30d(location_id))
    return LocationStatsResponse(
        location_id=summary.location_id,
        reviews_30d=summary.review_count,
        avg_rating_30d=summary.average_rating,
    )


@router.get("/brand/{brand_id}/heatmap", response_model=BrandHeatmapResponse)
async def brand_heatmap(
    brand_id: str,
    from_: Optional[str] = Query(default=None, alias="from", description="Window start, YYYY-MM-DD or ISO-8601"),
    to: Optional[str] = Query(default=None, description="Window end (inclusive), YYYY-MM-DD or ISO-8601"),
    store: CommerceStore = Depends(get_store),
):
    """
    Per-city review count and average rating for every location of a brand.

    Cities with no reviews in the window are omitted, not reported as zero.
    Reviews whose location has no city are grouped under "Unknown".
    """
    try:
        window = resolve_window(from_, to, days=settings.heatmap_default_days)
    except InvalidWindowBoundary as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    reviews = await store.fetch_brand_reviews(brand_id, window)
    groups = aggregate_by_group(reviews)

    rows = [
        CityHeatmapRow(city=g.group_key, reviews=g.review_count, avg_rating=float(g.average_rating))
        for g in sorted(groups, key=lambda g: g.group_key)
    ]
    return BrandHeatmapResponse(rows=rows, window=WindowOut(from_=window.start, to=window.end))
