#!/usr/bin/env python3
"""
seed_commerce.py — Populate MongoDB with realistic locations and reviews.

Usage (from the repository root):
    python scripts/seed_commerce.py           # replace existing seed data
    python scripts/seed_commerce.py --append  # add reviews without clearing first

Prerequisites:
    • MONGO_URI env var set (or .env file present)
    • `pip install -e .`

What this script creates
────────────────────────
  locations       ← 14 storefronts across 3 brands and 8 cities
  reviews         ← ~600 reviews spread over the last 45 days, so both the
                    30-day view and a custom heatmap window have data
  v_location_30d  ← the trailing 30-day stats view (if missing)
  indexes         ← the ones CommerceStore.ensure_schema() maintains

Try it:
    curl http://localhost:8000/stats/location/loc_001
    curl http://localhost:8000/stats/brand/brand_chai/heatmap
"""

import argparse
import asyncio
import os
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

load_dotenv(ROOT / ".env")

from app.services.store import LOCATIONS, REVIEWS, CommerceStore  # noqa: E402

import certifi
from motor.motor_asyncio import AsyncIOMotorClient

MONGO_URI = os.environ.get("MONGO_URI", "")
MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "nearby_commerce")

if not MONGO_URI:
    print("ERROR: MONGO_URI not set. Add it to .env")
    sys.exit(1)

# ── Seed locations ────────────────────────────────────────────────────────────
# Columns: id, brand_id, city, status, mean rating (drives the random ratings)
_LOCATIONS = [
    ("loc_001", "brand_chai",   "Delhi",     "active", 4.3),
    ("loc_002", "brand_chai",   "Delhi",     "active", 3.9),
    ("loc_003", "brand_chai",   "Pune",      "active", 4.1),
    ("loc_004", "brand_chai",   "Mumbai",    "active", 3.4),
    ("loc_005", "brand_chai",   None,        "active", 3.8),   # city not captured yet
    ("loc_006", "brand_dosa",   "Bengaluru", "active", 4.5),
    ("loc_007", "brand_dosa",   "Chennai",   "active", 4.2),
    ("loc_008", "brand_dosa",   "Hyderabad", "active", 3.6),
    ("loc_009", "brand_dosa",   "Bengaluru", "closed", 2.9),
    ("loc_010", "brand_kulfi",  "Jaipur",    "active", 4.0),
    ("loc_011", "brand_kulfi",  "Delhi",     "active", 3.7),
    ("loc_012", "brand_kulfi",  "Pune",      "active", 4.4),
    ("loc_013", "brand_kulfi",  "Mumbai",    "paused", 3.1),
    ("loc_014", "brand_kulfi",  "Jaipur",    "active", 4.6),
]

_SNIPPETS = {
    1: ["Cold food, long wait.", "Order was wrong twice."],
    2: ["Staff seemed overwhelmed.", "Too expensive for the portion."],
    3: ["Okay, nothing special.", "Decent but slow."],
    4: ["Quick service, friendly staff.", "Good value, will come back."],
    5: ["Best in the city!", "Spotless and delicious."],
}

_REVIEW_DAYS = 45


def _rating_around(mean: float) -> int:
    return max(1, min(5, round(random.gauss(mean, 0.9))))


def _make_review(location_id: str, mean: float) -> dict:
    """One review document, created at a random instant in the last 45 days."""
    rating = _rating_around(mean)
    age = timedelta(seconds=random.uniform(0, _REVIEW_DAYS * 24 * 3600))
    return {
        "location_id": location_id,
        "rating":      rating,
        "review_text": random.choice(_SNIPPETS[rating]) if random.random() < 0.7 else None,
        "created_at":  datetime.now(tz=timezone.utc) - age,
    }


async def seed(append: bool = False) -> None:
    client = AsyncIOMotorClient(MONGO_URI, tlsCAFile=certifi.where(), tz_aware=True)
    db = client[MONGO_DB_NAME]

    # ── locations ─────────────────────────────────────────────────────────────
    print("Upserting locations…")
    for loc_id, brand_id, city, status, _mean in _LOCATIONS:
        await db[LOCATIONS].update_one(
            {"id": loc_id},
            {"$set": {"id": loc_id, "brand_id": brand_id, "city": city, "status": status}},
            upsert=True,
        )
    print(f"  {len(_LOCATIONS)} location documents upserted")

    # ── reviews ───────────────────────────────────────────────────────────────
    if not append:
        print("\nClearing existing reviews…")
        result = await db[REVIEWS].delete_many({})
        print(f"  Deleted {result.deleted_count} existing documents")

    print("\nInserting reviews…")
    docs = [
        _make_review(loc_id, mean)
        for loc_id, _brand, _city, status, mean in _LOCATIONS
        for _ in range(random.randint(10, 30 if status == "active" else 12) * 2)
    ]
    result = await db[REVIEWS].insert_many(docs)
    print(f"  Inserted {len(result.inserted_ids)} reviews over the last {_REVIEW_DAYS} days")

    # ── View + indexes ────────────────────────────────────────────────────────
    print("\nEnsuring view and indexes…")
    await CommerceStore(db).ensure_schema()

    # ── Verify ────────────────────────────────────────────────────────────────
    total = await db[REVIEWS].count_documents({})
    brands = await db[LOCATIONS].distinct("brand_id")
    cities = await db[LOCATIONS].distinct("city")

    print(f"\n✓ Done")
    print(f"  reviews total : {total}")
    print(f"  Brands        : {sorted(brands)}")
    print(f"  Cities        : {sorted(c for c in cities if c)}")

    client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed Nearby Commerce locations and reviews into MongoDB")
    parser.add_argument(
        "--append",
        action="store_true",
        help="Add reviews without clearing existing data first",
    )
    args = parser.parse_args()

    print(f"Nearby Commerce Seeder  (db: {MONGO_DB_NAME})")
    print(f"Mode: {'append' if args.append else 'replace'}\n")

    asyncio.run(seed(append=args.append))
