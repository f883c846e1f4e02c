"""
MongoDB connection management using Motor (async driver).

Architecture decision: single DatabaseClient instance shared across all
requests via a module-level singleton. FastAPI's dependency injection
(get_db) gives routes clean access without importing the singleton directly.

Collections used by the service:
  reviews         — one document per customer review
  locations       — one document per storefront (city, brand_id, status)
  v_location_30d  — read-only view: trailing 30-day stats per location

The connection is opened in FastAPI's lifespan (startup) and closed
on shutdown. Startup also makes sure the 30-day view and the indexes
the analytics queries rely on exist.
"""

import logging
import re

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.config import settings

logger = logging.getLogger(__name__)


class DatabaseClient:
    """
    Holds the Motor client and selected database.

    Tests replace .client and .db directly (see tests/conftest.py).
    """

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None


# Module-level singleton; all app code references this object
db_client = DatabaseClient()


async def connect_to_mongo() -> None:
    """
    Create the MongoDB connection and validate it with a ping.

    Called once at app startup (via lifespan). Fails gracefully if
    MongoDB is unavailable: the API still answers /healthz, and
    DB-dependent endpoints return 503.
    """
    from app.services.store import CommerceStore, StoreError

    logger.info("Connecting to MongoDB at %s", _redact_uri(settings.mongo_uri))
    try:
        db_client.client = AsyncIOMotorClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            tz_aware=True,
            tlsCAFile=certifi.where(),
        )
        db_client.db = db_client.client[settings.mongo_db_name]
        await db_client.client.admin.command("ping")
        logger.info("MongoDB connection established (db: %s)", settings.mongo_db_name)
    except PyMongoError as exc:
        logger.warning(
            "MongoDB unavailable at startup: %s. "
            "API running in degraded mode, DB endpoints will fail.",
            exc,
        )
        db_client.client = None
        db_client.db = None
        return

    try:
        await CommerceStore(db_client.db).ensure_schema()
    except StoreError as exc:
        # Missing view/indexes only slow queries down or empty /stats/location.
        logger.warning("Could not ensure indexes / views: %s", exc)


async def close_mongo_connection() -> None:
    """Close the MongoDB connection gracefully on app shutdown."""
    if db_client.client is not None:
        db_client.client.close()
        logger.info("MongoDB connection closed")


def get_db() -> AsyncIOMotorDatabase | None:
    """
    FastAPI dependency: inject the database into route handlers.

    Returns None when MongoDB is unavailable; routes answer 503 in that case.
    """
    return db_client.db


def _redact_uri(uri: str) -> str:
    """Strip credentials from URI before logging."""
    return re.sub(r"://[^:]+:[^@]+@", "://<redacted>@", uri)
