"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction
  - Load balancers / orchestrators
  - Uptime monitors

Returns liveness plus DB connectivity so callers can distinguish between
"API down" and "API up but DB unreachable".
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from app.core import database as db_module
from app.core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter()

API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    ok: bool  # Always True if the API process is alive
    service: str
    time: datetime
    version: str
    database: str  # "connected" | "disconnected"
    environment: str


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check() -> HealthResponse:
    """
    Returns the liveness status of the API and its database connection.

    The API is considered healthy (HTTP 200) even when the database is
    disconnected.
    """
    db_status = "disconnected"
    try:
        # Access via module reference so tests can patch db_module.db_client
        if db_module.db_client.client is not None:
            await db_module.db_client.client.admin.command("ping")
            db_status = "connected"
    except PyMongoError as exc:
        logger.warning("DB ping failed: %s", exc)

    return HealthResponse(
        ok=True,
        service=settings.service_name,
        time=datetime.now(tz=timezone.utc),
        version=API_VERSION,
        database=db_status,
        environment=settings.environment,
    )
