"""
locations.py — Storefront listing.

Routes:
  GET /locations?city=&status=

`city` is a case-insensitive ILIKE pattern ('Delhi', '%del%', 'Pun_');
`status` is an exact match ('active', 'closed', ...).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.models.location import LocationListResponse
from app.services.store import CommerceStore, get_store

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=LocationListResponse)
async def list_locations(
    city: Optional[str] = Query(default=None, description="ILIKE pattern, e.g. 'Delhi' or '%del%'"),
    status: Optional[str] = Query(default=None),
    store: CommerceStore = Depends(get_store),
):
    """Return all matching locations ordered by id."""
    rows = await store.list_locations(city=city, status=status)
    return LocationListResponse(count=len(rows), rows=rows)
