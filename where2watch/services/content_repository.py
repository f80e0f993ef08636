"""Content repository over the ``contents`` table.

Maps rows to ``Content`` on read (normalizing the JSON text columns) and
serializes nested collections back to JSON text on write.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from where2watch.core.errors import NotFoundError, RepositoryError, ValidationError
from where2watch.models.content import Content, ContentType
from where2watch.models.tables import CategoryContentRow, ContentRow, ContentViewRow
from where2watch.services.normalizers import (
    normalize_cast,
    normalize_embed_videos,
    normalize_images,
    normalize_seasons,
    normalize_watch_providers,
)
from where2watch.services.shaping import prepare_for_write

logger = logging.getLogger(__name__)

TYPE_FILTERS = ("movie", "tv", "all")


def _coerce_type(raw_type: Optional[str], content_id: str) -> str:
    if raw_type == ContentType.MOVIE.value:
        return ContentType.MOVIE.value
    if raw_type != ContentType.TV.value:
        logger.warning(
            "Content %s has unknown type %r, reading it as 'tv'", content_id, raw_type
        )
    return ContentType.TV.value


def row_to_content(row: ContentRow) -> Content:
    """Convert a stored row into a ``Content``."""
    return Content.model_validate(
        {
            "id": row.id,
            "title": row.title,
            "overview": row.overview or "",
            "poster_path": row.poster_path or "",
            "backdrop_path": row.backdrop_path,
            "release_date": row.release_date,
            "type": _coerce_type(row.type, row.id),
            "genres": row.genres or [],
            "rating": row.rating,
            "duration": row.duration,
            "status": row.status,
            "trailer_url": row.trailer_url,
            "watch_providers": normalize_watch_providers(row.watch_providers),
            "cast": normalize_cast(row.cast_info),
            "seasons": normalize_seasons(row.seasons),
            "images": normalize_images(row.images),
            "embed_videos": normalize_embed_videos(row.embed_videos),
            "updated_at": row.updated_at,
        }
    )


def _dump_list(items) -> str:
    return json.dumps([item.model_dump(by_alias=True, mode="json") for item in items])


def content_to_row_values(content: Content) -> dict:
    """Column values for ``content`` (without ``id`` and ``updated_at``)."""
    return {
        "title": content.title,
        "overview": content.overview,
        "poster_path": content.poster_path,
        "backdrop_path": content.backdrop_path,
        "release_date": content.release_date,
        "type": content.type.value,
        "genres": list(content.genres),
        "rating": content.rating,
        "duration": content.duration,
        "status": content.status,
        "trailer_url": content.trailer_url,
        "embed_videos": _dump_list(content.embed_videos),
        "images": _dump_list(content.images),
        "watch_providers": _dump_list(content.watch_providers),
        "seasons": _dump_list(content.seasons),
        "cast_info": _dump_list(content.cast),
    }


class ContentRepository:
    """CRUD and text search for catalog content."""

    def __init__(self, session: Session):
        self._session = session

    def _to_contents(self, rows: List[ContentRow], operation: str) -> List[Content]:
        try:
            return [row_to_content(row) for row in rows]
        except PydanticValidationError as exc:
            logger.error("%s: stored content failed to decode: %s", operation, exc)
            raise RepositoryError(operation, "stored content failed to decode", exc)

    def _fail(self, operation: str, exc: Exception, content_id: str = None):
        self._session.rollback()
        logger.error("%s failed (id=%s): %s", operation, content_id, exc)
        return RepositoryError(operation, str(exc), exc)

    def get_all(self) -> List[Content]:
        try:
            rows = self._session.exec(
                select(ContentRow).order_by(col(ContentRow.title))
            ).all()
        except SQLAlchemyError as exc:
            raise self._fail("get_all", exc)
        return self._to_contents(rows, "get_all")

    def get_by_id(self, content_id) -> Optional[Content]:
        """Fetch one entry; ``None`` when the id is empty or unknown."""
        if not isinstance(content_id, str) or not content_id:
            logger.warning("get_by_id called with invalid id %r", content_id)
            return None
        try:
            row = self._session.get(ContentRow, content_id)
        except SQLAlchemyError as exc:
            raise self._fail("get_by_id", exc, content_id)
        if row is None:
            logger.warning("Content %s not found", content_id)
            return None
        return self._to_contents([row], "get_by_id")[0]

    def get_by_type(self, content_type: str) -> List[Content]:
        """Fetch entries of one type; ``"all"`` skips the filter."""
        value = getattr(content_type, "value", content_type)
        if value not in TYPE_FILTERS:
            raise ValidationError(
                f"Content type must be one of {', '.join(TYPE_FILTERS)}, got {value!r}"
            )
        if value == "all":
            return self.get_all()
        try:
            rows = self._session.exec(
                select(ContentRow)
                .where(ContentRow.type == value)
                .order_by(col(ContentRow.title))
            ).all()
        except SQLAlchemyError as exc:
            raise self._fail("get_by_type", exc)
        return self._to_contents(rows, "get_by_type")

    def search(self, query: str) -> List[Content]:
        """Case-insensitive substring search over title and overview."""
        query = (query or "").strip()
        if not query:
            return []
        try:
            rows = self._session.exec(
                select(ContentRow)
                .where(
                    or_(
                        col(ContentRow.title).icontains(query, autoescape=True),
                        col(ContentRow.overview).icontains(query, autoescape=True),
                    )
                )
                .order_by(col(ContentRow.title))
            ).all()
        except SQLAlchemyError as exc:
            raise self._fail("search", exc)
        return self._to_contents(rows, "search")

    def create(self, content: Content) -> Content:
        """Insert ``content`` and return the stored version."""
        content = prepare_for_write(content)
        content_id = content.id or uuid.uuid4().hex
        row = ContentRow(
            id=content_id,
            updated_at=datetime.now(timezone.utc),
            **content_to_row_values(content),
        )
        try:
            self._session.add(row)
            self._session.commit()
            self._session.refresh(row)
        except SQLAlchemyError as exc:
            raise self._fail("create", exc, content_id)
        logger.info("Created content %s (%s)", content_id, content.title)
        return self._to_contents([row], "create")[0]

    def update(self, content: Content) -> Content:
        """Replace every field of an existing entry."""
        if not content.id:
            raise ValidationError("Content id is required for update")
        content = prepare_for_write(content)
        try:
            row = self._session.get(ContentRow, content.id)
            if row is None:
                raise NotFoundError("update", f"content {content.id} does not exist")
            for key, value in content_to_row_values(content).items():
                setattr(row, key, value)
            row.updated_at = datetime.now(timezone.utc)
            self._session.add(row)
            self._session.commit()
            self._session.refresh(row)
        except SQLAlchemyError as exc:
            raise self._fail("update", exc, content.id)
        except RepositoryError as exc:
            logger.error("update failed (id=%s): %s", content.id, exc)
            raise
        logger.info("Updated content %s", content.id)
        return self._to_contents([row], "update")[0]

    def delete(self, content_id: str) -> None:
        """Delete an entry with its category memberships and views."""
        try:
            row = self._session.get(ContentRow, content_id)
            if row is None:
                raise NotFoundError("delete", f"content {content_id} does not exist")
            dependents = [
                *self._session.exec(
                    select(CategoryContentRow).where(
                        CategoryContentRow.content_id == content_id
                    )
                ).all(),
                *self._session.exec(
                    select(ContentViewRow).where(
                        ContentViewRow.content_id == content_id
                    )
                ).all(),
            ]
            for dependent in dependents:
                self._session.delete(dependent)
            self._session.delete(row)
            self._session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete", exc, content_id)
        except RepositoryError as exc:
            logger.error("delete failed (id=%s): %s", content_id, exc)
            raise
        logger.info("Deleted content %s", content_id)
