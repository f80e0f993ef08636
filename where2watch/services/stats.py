"""View tracking and catalog aggregates."""

import logging
from typing import List

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from where2watch.core.errors import NotFoundError, RepositoryError
from where2watch.models.tables import ContentRow, ContentViewRow

logger = logging.getLogger(__name__)


class ContentViewStat(BaseModel):
    content_id: str
    title: str
    view_count: int


class ContentTypeStat(BaseModel):
    type: str
    count: int


class StatsService:
    """Records content views and reports per-content and per-type counts."""

    def __init__(self, session: Session):
        self._session = session

    def record_view(self, content_id: str) -> None:
        try:
            if self._session.get(ContentRow, content_id) is None:
                raise NotFoundError(
                    "record_view", f"content {content_id} does not exist"
                )
            self._session.add(ContentViewRow(content_id=content_id))
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error("record_view failed (id=%s): %s", content_id, exc)
            raise RepositoryError("record_view", str(exc), exc)

    def view_counts(self) -> List[ContentViewStat]:
        """View count per content, most viewed first."""
        view_count = func.count(ContentViewRow.id).label("view_count")
        statement = (
            select(ContentRow.id, ContentRow.title, view_count)
            .join(ContentViewRow, ContentViewRow.content_id == ContentRow.id)
            .group_by(ContentRow.id, ContentRow.title)
            .order_by(view_count.desc(), ContentRow.title)
        )
        try:
            rows = self._session.exec(statement).all()
        except SQLAlchemyError as exc:
            logger.error("view_counts failed: %s", exc)
            raise RepositoryError("view_counts", str(exc), exc)
        return [
            ContentViewStat(content_id=content_id, title=title, view_count=count)
            for content_id, title, count in rows
        ]

    def type_counts(self) -> List[ContentTypeStat]:
        """Number of entries per stored content type."""
        statement = (
            select(ContentRow.type, func.count(ContentRow.id))
            .group_by(ContentRow.type)
            .order_by(ContentRow.type)
        )
        try:
            rows = self._session.exec(statement).all()
        except SQLAlchemyError as exc:
            logger.error("type_counts failed: %s", exc)
            raise RepositoryError("type_counts", str(exc), exc)
        return [ContentTypeStat(type=t, count=count) for t, count in rows]
