"""Category aggregation and home-page sections."""

import logging
import uuid
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from where2watch.core.errors import NotFoundError, RepositoryError, ValidationError
from where2watch.models.content import Category, Content
from where2watch.models.tables import CategoryContentRow, CategoryRow, ContentRow
from where2watch.services.content_repository import ContentRepository

logger = logging.getLogger(__name__)

LATEST_ADDITIONS = "Latest Additions"
TOP_RATED = "Top Rated"
TOP_RATED_MIN_RATING = 7.0
TOP_RATED_LIMIT = 20
GENRE_MIN_MEMBERS = 3


class CategoryService:
    """Reads and curates categories on top of the content repository."""

    def __init__(self, session: Session, contents: ContentRepository | None = None):
        self._session = session
        self._contents = contents or ContentRepository(session)

    def _fail(self, operation: str, exc: Exception) -> RepositoryError:
        self._session.rollback()
        logger.error("%s failed: %s", operation, exc)
        return RepositoryError(operation, str(exc), exc)

    def get_categories(self) -> List[Category]:
        """Materialize every category with its member content."""
        try:
            category_rows = self._session.exec(
                select(CategoryRow).order_by(col(CategoryRow.name))
            ).all()
            memberships = self._session.exec(select(CategoryContentRow)).all()
        except SQLAlchemyError as exc:
            raise self._fail("get_categories", exc)

        by_id: Dict[str, Content] = {c.id: c for c in self._contents.get_all()}
        members: Dict[str, List[Content]] = defaultdict(list)
        for membership in memberships:
            content = by_id.get(membership.content_id)
            if content is None:
                logger.debug(
                    "Skipping membership of missing content %s in category %s",
                    membership.content_id,
                    membership.category_id,
                )
                continue
            members[membership.category_id].append(content)

        return [
            Category(id=row.id, name=row.name, contents=members.get(row.id, []))
            for row in category_rows
        ]

    def create_category(self, name: str) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        row = CategoryRow(id=uuid.uuid4().hex, name=name)
        try:
            self._session.add(row)
            self._session.commit()
            self._session.refresh(row)
        except SQLAlchemyError as exc:
            raise self._fail("create_category", exc)
        logger.info("Created category %s (%s)", row.id, row.name)
        return Category(id=row.id, name=row.name, contents=[])

    def delete_category(self, category_id: str) -> None:
        try:
            row = self._session.get(CategoryRow, category_id)
            if row is None:
                raise NotFoundError(
                    "delete_category", f"category {category_id} does not exist"
                )
            for membership in self._session.exec(
                select(CategoryContentRow).where(
                    CategoryContentRow.category_id == category_id
                )
            ).all():
                self._session.delete(membership)
            self._session.delete(row)
            self._session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete_category", exc)

    def add_content(self, category_id: str, content_id: str) -> None:
        """Add a content entry to a category; adding twice is a no-op."""
        try:
            if self._session.get(CategoryRow, category_id) is None:
                raise NotFoundError(
                    "add_content", f"category {category_id} does not exist"
                )
            if self._session.get(ContentRow, content_id) is None:
                raise NotFoundError(
                    "add_content", f"content {content_id} does not exist"
                )
            if self._session.get(CategoryContentRow, (category_id, content_id)):
                return
            self._session.add(
                CategoryContentRow(category_id=category_id, content_id=content_id)
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("add_content", exc)

    def remove_content(self, category_id: str, content_id: str) -> None:
        try:
            membership = self._session.get(
                CategoryContentRow, (category_id, content_id)
            )
            if membership is None:
                raise NotFoundError(
                    "remove_content",
                    f"content {content_id} is not in category {category_id}",
                )
            self._session.delete(membership)
            self._session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("remove_content", exc)


def _newest_first(content: Content) -> datetime:
    # SQLite hands back naive timestamps, freshly built models carry tz-aware ones
    if content.updated_at is None:
        return datetime.min
    return content.updated_at.replace(tzinfo=None)


def build_home_sections(
    categories: List[Category], contents: List[Content]
) -> List[Category]:
    """Derive the home page rows from stored categories and all content.

    Order: stored categories, "Latest Additions" (content in no category),
    "Top Rated", then genre buckets with at least three members, largest
    first. Empty derived sections are left out.
    """
    sections = [c for c in categories if c.contents]

    categorized = {content.id for c in categories for content in c.contents}
    uncategorized = [c for c in contents if c.id not in categorized]
    if uncategorized:
        sections.append(
            Category(
                id="latest-additions",
                name=LATEST_ADDITIONS,
                contents=sorted(uncategorized, key=_newest_first, reverse=True),
            )
        )

    top_rated = sorted(
        (c for c in contents if c.rating >= TOP_RATED_MIN_RATING),
        key=lambda c: c.rating,
        reverse=True,
    )[:TOP_RATED_LIMIT]
    if top_rated:
        sections.append(Category(id="top-rated", name=TOP_RATED, contents=top_rated))

    by_genre: Dict[str, List[Content]] = defaultdict(list)
    for content in contents:
        for genre in dict.fromkeys(content.genres):
            by_genre[genre].append(content)
    sizes = Counter({genre: len(items) for genre, items in by_genre.items()})
    for genre, size in sizes.most_common():
        if size < GENRE_MIN_MEMBERS:
            break
        slug = genre.lower().replace(" ", "-")
        sections.append(
            Category(id=f"genre-{slug}", name=genre, contents=by_genre[genre])
        )

    return sections
