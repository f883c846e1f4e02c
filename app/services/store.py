"""
store.py — MongoDB queries behind the reviews / locations / stats routes.

CommerceStore wraps a Motor database handle and exposes exactly the query
shapes the API needs. It filters rows (by location, brand and date range)
but does not aggregate them beyond what the v_location_30d view does;
per-city averaging lives in app/services/analytics.py.

Every PyMongoError is logged and re-raised as StoreError so routes only
have one failure type to care about. "No matching document" is NOT an
error: lookups return None or an empty list.

DOCUMENT SHAPES
───────────────
  locations       { id: "loc_001", city: "Delhi", brand_id: "brand_a", status: "active", ... }
  reviews         { _id: ObjectId, location_id: "loc_001", rating: 4,
                    review_text: "Quick service", created_at: ISODate(...) }
  v_location_30d  { location_id: "loc_001", reviews_30d: 7, avg_rating_30d: 4.14 }
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from fastapi import Depends, HTTPException
from pymongo.errors import PyMongoError

from app.core.database import get_db
from app.models.location import LocationOut
from app.models.review import ReviewCreate, ReviewOut
from app.models.stats import GroupedReview, LocationStatsRow, TimeWindow

logger = logging.getLogger(__name__)

REVIEWS = "reviews"
LOCATIONS = "locations"
LOCATION_30D_VIEW = "v_location_30d"

# Baked into the v_location_30d view definition; independent of
# settings.heatmap_default_days.
LOCATION_VIEW_DAYS = 30
_MS_PER_DAY = 24 * 3600 * 1000


class StoreError(Exception):
    """The database reported a fault unrelated to "no rows"."""


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.warning("Store operation %s failed: %s", operation, exc)
        raise StoreError(str(exc)) from exc


def location_30d_pipeline(days: int = LOCATION_VIEW_DAYS) -> list[dict]:
    """Aggregation pipeline backing the v_location_30d view."""
    return [
        {"$match": {"$expr": {"$gte": ["$created_at", {"$subtract": ["$$NOW", days * _MS_PER_DAY]}]}}},
        {"$group": {
            "_id":            "$location_id",
            "reviews_30d":    {"$sum": 1},
            "avg_rating_30d": {"$avg": "$rating"},
        }},
        {"$project": {
            "_id":            0,
            "location_id":    "$_id",
            "reviews_30d":    1,
            "avg_rating_30d": {"$round": ["$avg_rating_30d", 2]},
        }},
    ]


def ilike_to_regex(pattern: str) -> str:
    """
    Translate a SQL ILIKE pattern into an anchored regex.

    '%' matches any run of characters, '_' exactly one; everything else is
    literal. Case-insensitivity comes from the $options flag at query time.
        'Delhi' → '^Delhi$'      '%del%' → '^.*del.*$'
    """
    parts = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return "^" + "".join(parts) + "$"


def _as_utc(value: datetime) -> datetime:
    # Motor returns naive datetimes unless the client is tz_aware.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _doc_to_review(doc: dict) -> ReviewOut:
    return ReviewOut(
        id=str(doc["_id"]),
        location_id=str(doc["location_id"]),
        rating=doc["rating"],
        review_text=doc.get("review_text"),
        created_at=_as_utc(doc["created_at"]),
    )


def _doc_to_location(doc: dict) -> LocationOut:
    fields: dict[str, Any] = {k: v for k, v in doc.items() if k != "_id"}
    fields["id"] = str(doc.get("id", doc.get("_id")))
    return LocationOut(**fields)


class CommerceStore:
    """Query capability over the reviews and locations collections."""

    def __init__(self, db):
        self._db = db

    async def ensure_schema(self) -> None:
        """Idempotently create the 30-day view and the indexes queries rely on."""
        with _store_errors("ensure_schema"):
            existing = await self._db.list_collection_names()
            if LOCATION_30D_VIEW not in existing:
                await self._db.create_collection(
                    LOCATION_30D_VIEW,
                    viewOn=REVIEWS,
                    pipeline=location_30d_pipeline(),
                )
                logger.info("Created view %s", LOCATION_30D_VIEW)

            await self._db[REVIEWS].create_index(
                [("location_id", 1), ("created_at", -1)],
                name="location_created_desc",
            )
            await self._db[REVIEWS].create_index([("created_at", -1)], name="created_desc")
            await self._db[LOCATIONS].create_index([("id", 1)], name="id_unique", unique=True)
            await self._db[LOCATIONS].create_index([("brand_id", 1)], name="brand_asc")

    async def list_reviews(self, location_id: Optional[str] = None, limit: int = 100) -> list[ReviewOut]:
        """Newest reviews first, optionally for one location only."""
        query: dict = {}
        if location_id:
            query["location_id"] = location_id

        with _store_errors("list_reviews"):
            cursor = self._db[REVIEWS].find(query).sort("created_at", -1).limit(limit)
            docs = await cursor.to_list(length=limit)
        return [_doc_to_review(d) for d in docs]

    async def insert_review(self, payload: ReviewCreate) -> ReviewOut:
        doc = {
            "location_id": payload.location_id,
            "rating":      payload.rating,
            "review_text": payload.review_text,
            "created_at":  datetime.now(tz=timezone.utc),
        }
        with _store_errors("insert_review"):
            result = await self._db[REVIEWS].insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Stored review %s for location %s", result.inserted_id, payload.location_id)
        return _doc_to_review(doc)

    async def list_locations(self, city: Optional[str] = None, status: Optional[str] = None) -> list[LocationOut]:
        """All locations ordered by id; `city` is an ILIKE pattern, `status` exact."""
        query: dict = {}
        if city:
            query["city"] = {"$regex": ilike_to_regex(city), "$options": "i"}
        if status:
            query["status"] = status

        with _store_errors("list_locations"):
            docs = await self._db[LOCATIONS].find(query).sort("id", 1).to_list(length=None)
        return [_doc_to_location(d) for d in docs]

    async def fetch_location_30d(self, location_id: str) -> Optional[LocationStatsRow]:
        """The v_location_30d row for one location, or None if it had no reviews."""
        with _store_errors("fetch_location_30d"):
            doc = await self._db[LOCATION_30D_VIEW].find_one({"location_id": location_id})
        if doc is None:
            return None
        return LocationStatsRow(**{**doc, "location_id": str(doc.get("location_id", location_id))})

    async def fetch_brand_reviews(self, brand_id: str, window: TimeWindow) -> list[GroupedReview]:
        """
        Reviews for every location of `brand_id` created inside the window
        (inclusive), each tagged with its location's city.

        Two round trips: the brand's locations first (id → city), then the
        reviews for those ids. An inverted window simply matches nothing.
        """
        with _store_errors("fetch_brand_reviews"):
            cities: dict[str, Optional[str]] = {}
            async for loc in self._db[LOCATIONS].find({"brand_id": brand_id}, {"id": 1, "city": 1}):
                cities[str(loc.get("id", loc.get("_id")))] = loc.get("city")

            if not cities:
                return []

            query = {
                "location_id": {"$in": list(cities)},
                "created_at":  {"$gte": window.start, "$lte": window.end},
            }
            projection = {"rating": 1, "created_at": 1, "location_id": 1}
            rows = []
            async for doc in self._db[REVIEWS].find(query, projection):
                rows.append(GroupedReview(
                    rating=doc["rating"],
                    created_at=_as_utc(doc["created_at"]),
                    group_key=cities.get(str(doc["location_id"])),
                ))

        logger.debug("Brand %s: %d reviews in window %s → %s", brand_id, len(rows), window.start, window.end)
        return rows


# ── FastAPI dependency ────────────────────────────────────────────────────────

def get_store(db=Depends(get_db)) -> CommerceStore:
    """
    Inject a CommerceStore bound to the current database handle.

    Answers 503 when the app started without MongoDB (degraded mode).
    """
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return CommerceStore(db)
