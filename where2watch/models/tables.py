"""SQLModel tables for the catalog store.

Nested collections on ``contents`` are kept as JSON text, so the columns hold
exactly what the normalizers expect to parse back.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentRow(SQLModel, table=True):
    """A row of the ``contents`` table."""

    __tablename__ = "contents"

    id: str = Field(primary_key=True)
    title: str
    overview: str = ""
    poster_path: str = ""
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    type: str = Field(index=True)
    genres: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    rating: float = 0.0
    duration: Optional[str] = None
    status: Optional[str] = None
    trailer_url: Optional[str] = None
    embed_videos: Optional[str] = Field(default=None, sa_column=Column(Text))
    images: Optional[str] = Field(default=None, sa_column=Column(Text))
    watch_providers: Optional[str] = Field(default=None, sa_column=Column(Text))
    seasons: Optional[str] = Field(default=None, sa_column=Column(Text))
    cast_info: Optional[str] = Field(default=None, sa_column=Column(Text))
    updated_at: Optional[datetime] = Field(default_factory=_utcnow)


class CategoryRow(SQLModel, table=True):
    """A row of the ``categories`` table."""

    __tablename__ = "categories"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)


class CategoryContentRow(SQLModel, table=True):
    """Category membership (``category_contents`` join table)."""

    __tablename__ = "category_contents"

    category_id: str = Field(foreign_key="categories.id", primary_key=True)
    content_id: str = Field(foreign_key="contents.id", primary_key=True)


class ContentViewRow(SQLModel, table=True):
    """A single recorded view of a content page."""

    __tablename__ = "content_views"

    id: Optional[int] = Field(default=None, primary_key=True)
    content_id: str = Field(foreign_key="contents.id", index=True)
    viewed_at: datetime = Field(default_factory=_utcnow)
