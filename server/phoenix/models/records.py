"""SQLModel tables for the records curated on edit.tosdr.org.

Column names follow the upstream schema, including the camel-cased
``quoteText``. Accessors read these tables with ``SELECT *`` semantics and
hand rows around as plain mappings keyed by column name.
"""

from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field, Column, DateTime
from sqlalchemy import Text, func


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Service(SQLModel, table=True):
    """A tracked product or platform whose terms are reviewed."""

    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, index=True)
    slug: Optional[str] = Field(default=None, max_length=255, index=True)
    url: Optional[str] = Field(default=None, sa_column=Column(Text))
    wikipedia: Optional[str] = Field(default=None, max_length=255)
    rating: Optional[str] = Field(default=None, max_length=10)
    is_comprehensively_reviewed: bool = Field(default=False)
    image: Optional[str] = Field(default=None, max_length=255)
    status: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now())
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), onupdate=func.now())
    )


class Document(SQLModel, table=True):
    """A legal text (privacy policy, terms) belonging to a service."""

    __tablename__ = "documents"

    id: Optional[int] = Field(default=None, primary_key=True)
    service_id: int = Field(foreign_key="services.id", index=True)
    name: str = Field(max_length=255)
    url: Optional[str] = Field(default=None, sa_column=Column(Text))
    xpath: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now())
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), onupdate=func.now())
    )


class Case(SQLModel, table=True):
    """Classification template applied to points."""

    __tablename__ = "cases"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    classification: Optional[str] = Field(default=None, max_length=50)
    score: int = Field(default=0)
    topic_id: Optional[int] = Field(default=None, foreign_key="topics.id")
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now())
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), onupdate=func.now())
    )


class Topic(SQLModel, table=True):
    """Independent categorization axis."""

    __tablename__ = "topics"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now())
    )


class Point(SQLModel, table=True):
    """A single reviewed clause tied to a document and a case."""

    __tablename__ = "points"

    id: Optional[int] = Field(default=None, primary_key=True)
    service_id: int = Field(foreign_key="services.id", index=True)
    document_id: Optional[int] = Field(default=None, foreign_key="documents.id")
    case_id: Optional[int] = Field(default=None, foreign_key="cases.id")
    status: Optional[str] = Field(default=None, max_length=50)
    quote_text: Optional[str] = Field(default=None, sa_column=Column("quoteText", Text))
    title: Optional[str] = Field(default=None, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    analysis: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now())
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), onupdate=func.now())
    )


class Version(SQLModel, table=True):
    """Append-only audit record of a mutation to a service or document."""

    __tablename__ = "versions"

    id: Optional[int] = Field(default=None, primary_key=True)
    item_type: str = Field(max_length=50)
    item_id: int = Field(index=True)
    event: str = Field(max_length=50)
    object_changes: Optional[str] = Field(default=None, sa_column=Column(Text))
    whodunnit: Optional[str] = Field(default=None, max_length=255)
    object_: Optional[str] = Field(default=None, sa_column=Column("object", Text))
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now())
    )
