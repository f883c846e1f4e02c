"""
location.py — Pydantic schemas for storefront locations.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class LocationOut(BaseModel):
    """A storefront. Extra stored fields (name, address, ...) pass through as-is."""

    model_config = ConfigDict(extra="allow")

    id: str
    city: Optional[str] = None
    brand_id: Optional[str] = None
    status: Optional[str] = None


class LocationListResponse(BaseModel):
    ok: bool = True
    count: int
    rows: list[LocationOut]
