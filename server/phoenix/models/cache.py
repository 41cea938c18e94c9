"""SQLite-backed cache model for key-value storage with TTL.

Used when Redis is disabled or unreachable so cached reads still survive
a process restart on single-node deployments.
"""

import time
from typing import Optional
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Text


class CacheEntry(SQLModel, table=True):
    """Generic key-value cache entry with optional expiration."""

    __tablename__ = "cache_entries"

    key: str = Field(primary_key=True, max_length=512)
    value: str = Field(sa_column=Column(Text, nullable=False))  # JSON envelope
    expires_at: Optional[float] = Field(default=None, index=True)  # Unix timestamp
    created_at: float = Field(default_factory=time.time)
