"""
Database Models for URL Shortener Service

This module defines the SQLModel database schema for:
- Link: Stores the mapping between a short code and its destination URL,
  together with its visit counter

Design Decisions:
- UUID primary key: opaque identity, independent of the code, so visit
  updates can target one exact record
- Unique index on code: the database, not application code, guarantees
  that two links never share a code
- Index on created_at for newest-first listing
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, DateTime, Integer, Text

CODE_MAX_LENGTH = 8


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class Link(SQLModel, table=True):
    """
    Main table storing short code to destination mappings.

    Fields:
    - id: Opaque UUID assigned at creation
    - code: Unique short code (6-8 characters, [A-Za-z0-9])
    - destination: The absolute URL the code redirects to
    - visit_count: Number of successful resolutions
    - last_visited_at: Time of the most recent resolution (NULL until first visit)
    - created_at: Creation timestamp

    Only code and destination are chosen by the caller; no field except the
    visit metadata ever changes after insert.
    """
    __tablename__ = "links"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    code: str = Field(
        sa_column=Column(String(CODE_MAX_LENGTH), nullable=False, unique=True, index=True),
        max_length=CODE_MAX_LENGTH
    )
    destination: str = Field(sa_column=Column(Text, nullable=False))
    visit_count: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    last_visited_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
