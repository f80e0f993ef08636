import pytest

from where2watch.core.errors import NotFoundError, RepositoryError, ValidationError
from where2watch.models.content import Category, Content, ContentType
from where2watch.models.tables import CategoryContentRow
from where2watch.services.categories import (
    LATEST_ADDITIONS,
    TOP_RATED,
    CategoryService,
    build_home_sections,
)
from where2watch.services.content_repository import ContentRepository


def _content(content_id, rating=5.0, genres=(), content_type=ContentType.MOVIE):
    return Content(
        id=content_id,
        title=f"Title {content_id}",
        type=content_type,
        rating=rating,
        genres=list(genres),
    )


@pytest.fixture
def service(session):
    return CategoryService(session)


@pytest.fixture
def repo(session):
    return ContentRepository(session)


def test_get_categories_joins_members(service, repo):
    for content_id in ("a", "b", "c"):
        repo.create(_content(content_id))
    picks = service.create_category("Staff Picks")
    empty = service.create_category("Coming Soon")
    service.add_content(picks.id, "a")
    service.add_content(picks.id, "c")

    categories = {c.name: c for c in service.get_categories()}

    assert [c.id for c in categories["Staff Picks"].contents] == ["a", "c"]
    assert categories["Coming Soon"].id == empty.id
    assert categories["Coming Soon"].contents == []


def test_get_categories_skips_memberships_of_missing_content(service, repo, session):
    repo.create(_content("a"))
    picks = service.create_category("Staff Picks")
    session.add(CategoryContentRow(category_id=picks.id, content_id="gone"))
    session.commit()
    service.add_content(picks.id, "a")

    [category] = service.get_categories()

    assert [c.id for c in category.contents] == ["a"]


def test_add_content_twice_is_a_no_op(service, repo):
    repo.create(_content("a"))
    picks = service.create_category("Staff Picks")

    service.add_content(picks.id, "a")
    service.add_content(picks.id, "a")

    assert len(service.get_categories()[0].contents) == 1


def test_add_content_to_unknown_category_fails(service, repo):
    repo.create(_content("a"))
    with pytest.raises(NotFoundError):
        service.add_content("missing", "a")


def test_remove_content_and_delete_category(service, repo):
    repo.create(_content("a"))
    picks = service.create_category("Staff Picks")
    service.add_content(picks.id, "a")

    service.remove_content(picks.id, "a")
    assert service.get_categories()[0].contents == []

    service.delete_category(picks.id)
    assert service.get_categories() == []
    with pytest.raises(RepositoryError):
        service.remove_content(picks.id, "a")


def test_create_category_requires_name(service):
    with pytest.raises(ValidationError):
        service.create_category("  ")


def test_home_sections_cover_every_content_once():
    contents = [_content(str(i), rating=i % 10) for i in range(12)]
    categories = [
        Category(id="c1", name="Staff Picks", contents=contents[:3]),
        Category(id="c2", name="Classics", contents=contents[2:5]),
    ]

    sections = build_home_sections(categories, contents)

    named = {c.id for cat in categories for c in cat.contents}
    latest = next(s for s in sections if s.name == LATEST_ADDITIONS)
    latest_ids = {c.id for c in latest.contents}
    for content in contents:
        assert (content.id in named) != (content.id in latest_ids)


def test_top_rated_is_sorted_and_capped():
    contents = [_content(str(i), rating=7 + (i % 30) / 10) for i in range(25)]
    contents.append(_content("low", rating=6.9))

    sections = build_home_sections([], contents)
    top = next(s for s in sections if s.name == TOP_RATED)

    ratings = [c.rating for c in top.contents]
    assert len(ratings) == 20
    assert ratings == sorted(ratings, reverse=True)
    assert "low" not in {c.id for c in top.contents}


def test_genre_buckets_need_three_members_and_sort_by_size():
    contents = [
        _content("1", genres=["Drama", "Comedy"]),
        _content("2", genres=["Drama", "Comedy"]),
        _content("3", genres=["Drama", "Comedy"]),
        _content("4", genres=["Drama", "Horror"]),
        _content("5", genres=["Horror"]),
    ]

    sections = build_home_sections([], contents)
    genre_sections = [s.name for s in sections if s.id.startswith("genre-")]

    assert genre_sections == ["Drama", "Comedy"]


def test_empty_catalog_has_no_sections():
    assert build_home_sections([], []) == []
