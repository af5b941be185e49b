"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

Design Principles:
- Request models: Define input shape only; URL and code validation belong to
  the link registry so every caller gets the same rules
- Response models: Define output structure
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.db.models import Link


def build_short_url(base_url: str, code: str) -> str:
    """Join the public base URL and a code into the short link."""
    return f"{base_url.rstrip('/')}/{code}"


class LinkCreateRequest(BaseModel):
    """Request model for link creation endpoint."""
    destination: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("destination", "url"),
        description="The absolute URL to shorten (also accepted as 'url')"
    )
    code: Optional[str] = Field(
        default=None,
        description="Optional custom code matching [A-Za-z0-9]{6,8}"
    )


class LinkResponse(BaseModel):
    """Response model for a single link."""
    id: uuid.UUID
    code: str
    destination: str
    visit_count: int
    last_visited_at: Optional[datetime] = None
    created_at: datetime
    short_url: str = Field(..., description="The complete short URL")

    @field_validator("last_visited_at", "created_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive datetimes; every stored timestamp is UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_link(cls, link: Link, base_url: str) -> "LinkResponse":
        return cls(
            id=link.id,
            code=link.code,
            destination=link.destination,
            visit_count=link.visit_count,
            last_visited_at=link.last_visited_at,
            created_at=link.created_at,
            short_url=build_short_url(base_url, link.code),
        )


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""
    ok: bool
    version: str
