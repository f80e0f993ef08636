"""API routes returning JSON for the catalog front end and admin tools."""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlmodel import Session

from where2watch.core.database import get_session
from where2watch.models.content import (
    CatalogModel,
    Category,
    Content,
    ContentType,
    ImportedContent,
)
from where2watch.providers import StreamingServiceRegistry
from where2watch.services.categories import CategoryService, build_home_sections
from where2watch.services.content_repository import ContentRepository
from where2watch.services.deeplinks import build_deep_link
from where2watch.services.seasons import (
    add_episode,
    add_season,
    remove_episode,
    remove_season,
    set_episode_count,
)
from where2watch.services.stats import ContentTypeStat, ContentViewStat, StatsService
from where2watch.services.tmdb import import_from_tmdb

router = APIRouter()


def get_content_repository(session: Session = Depends(get_session)):
    return ContentRepository(session)


def get_category_service(session: Session = Depends(get_session)):
    return CategoryService(session)


def get_stats_service(session: Session = Depends(get_session)):
    return StatsService(session)


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "where2watch"}


# --- Content ---


@router.get("/contents", response_model=List[Content])
def list_contents(
    type: str = Query("all", description="Content type: movie, tv, or all"),
    repo: ContentRepository = Depends(get_content_repository),
):
    """List catalog content, optionally filtered by type."""
    return repo.get_by_type(type)


@router.get("/contents/{content_id}", response_model=Content)
def get_content(
    content_id: str, repo: ContentRepository = Depends(get_content_repository)
):
    content = repo.get_by_id(content_id)
    if content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return content


@router.post("/contents", response_model=Content, status_code=201)
def create_content(
    content: Content, repo: ContentRepository = Depends(get_content_repository)
):
    """Store a new entry (manual or a previously previewed import)."""
    return repo.create(content)


@router.put("/contents/{content_id}", response_model=Content)
def update_content(
    content_id: str,
    content: Content,
    repo: ContentRepository = Depends(get_content_repository),
):
    """Replace an entry; nested collections are replaced wholesale."""
    if content.id and content.id != content_id:
        raise HTTPException(status_code=400, detail="Content id does not match URL")
    if repo.get_by_id(content_id) is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return repo.update(content.model_copy(update={"id": content_id}))


@router.delete("/contents/{content_id}", status_code=204)
def delete_content(
    content_id: str, repo: ContentRepository = Depends(get_content_repository)
):
    if repo.get_by_id(content_id) is None:
        raise HTTPException(status_code=404, detail="Content not found")
    repo.delete(content_id)
    return Response(status_code=204)


@router.get("/search", response_model=List[Content])
def search_contents(
    q: str = Query(..., description="Search query"),
    repo: ContentRepository = Depends(get_content_repository),
):
    """Case-insensitive search over titles and overviews."""
    return repo.search(q)


# --- Seasons & episodes ---


class SeasonCreate(CatalogModel):
    name: Optional[str] = None


class EpisodeCreate(CatalogModel):
    title: Optional[str] = None


class EpisodeCountUpdate(CatalogModel):
    count: int


def _edit_seasons(content_id: str, repo: ContentRepository, edit) -> Content:
    """Load a TV entry, apply ``edit`` to its seasons and store the result."""
    content = repo.get_by_id(content_id)
    if content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    if content.type != ContentType.TV:
        raise HTTPException(status_code=400, detail="Only TV content has seasons")
    seasons = edit(content.seasons)
    return repo.update(content.model_copy(update={"seasons": seasons}))


@router.post("/contents/{content_id}/seasons", response_model=Content)
def create_season(
    content_id: str,
    request: Optional[SeasonCreate] = None,
    repo: ContentRepository = Depends(get_content_repository),
):
    name = request.name if request else None
    return _edit_seasons(content_id, repo, lambda s: add_season(s, name))


@router.delete(
    "/contents/{content_id}/seasons/{season_index}", response_model=Content
)
def delete_season(
    content_id: str,
    season_index: int,
    repo: ContentRepository = Depends(get_content_repository),
):
    """Remove a season by position; later seasons are renumbered."""
    return _edit_seasons(content_id, repo, lambda s: remove_season(s, season_index))


@router.post(
    "/contents/{content_id}/seasons/{season_index}/episodes", response_model=Content
)
def create_episode(
    content_id: str,
    season_index: int,
    request: Optional[EpisodeCreate] = None,
    repo: ContentRepository = Depends(get_content_repository),
):
    title = request.title if request else None
    return _edit_seasons(
        content_id, repo, lambda s: add_episode(s, season_index, title)
    )


@router.delete(
    "/contents/{content_id}/seasons/{season_index}/episodes/{episode_index}",
    response_model=Content,
)
def delete_episode(
    content_id: str,
    season_index: int,
    episode_index: int,
    repo: ContentRepository = Depends(get_content_repository),
):
    return _edit_seasons(
        content_id, repo, lambda s: remove_episode(s, season_index, episode_index)
    )


@router.put(
    "/contents/{content_id}/seasons/{season_index}/episode-count",
    response_model=Content,
)
def update_episode_count(
    content_id: str,
    season_index: int,
    request: EpisodeCountUpdate,
    repo: ContentRepository = Depends(get_content_repository),
):
    """Grow or shrink a season to exactly ``count`` episodes."""
    return _edit_seasons(
        content_id,
        repo,
        lambda s: set_episode_count(s, season_index, request.count),
    )


# --- Categories ---


class CategoryCreate(BaseModel):
    """Request body for creating a category."""

    name: str


@router.get("/categories", response_model=List[Category])
def list_categories(service: CategoryService = Depends(get_category_service)):
    return service.get_categories()


@router.post("/categories", response_model=Category, status_code=201)
def create_category(
    request: CategoryCreate, service: CategoryService = Depends(get_category_service)
):
    return service.create_category(request.name)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: str, service: CategoryService = Depends(get_category_service)
):
    service.delete_category(category_id)
    return Response(status_code=204)


@router.post("/categories/{category_id}/contents/{content_id}", status_code=204)
def add_to_category(
    category_id: str,
    content_id: str,
    service: CategoryService = Depends(get_category_service),
):
    service.add_content(category_id, content_id)
    return Response(status_code=204)


@router.delete("/categories/{category_id}/contents/{content_id}", status_code=204)
def remove_from_category(
    category_id: str,
    content_id: str,
    service: CategoryService = Depends(get_category_service),
):
    service.remove_content(category_id, content_id)
    return Response(status_code=204)


@router.get("/home", response_model=List[Category])
def home_sections(
    service: CategoryService = Depends(get_category_service),
    repo: ContentRepository = Depends(get_content_repository),
):
    """Stored categories plus the derived home page rows."""
    return build_home_sections(service.get_categories(), repo.get_all())


# --- Import & deep links ---


class ImportRequest(CatalogModel):
    """Request body for a TMDB import preview."""

    external_id: Union[int, str]
    type: str


@router.post("/import/tmdb", response_model=ImportedContent)
async def import_tmdb(request: ImportRequest):
    """Preview an import; the result is not stored until POSTed to /contents."""
    return await import_from_tmdb(request.external_id, request.type)


@router.get("/deeplink")
async def deep_link(
    provider: str = Query(..., description="Provider name as listed on the title"),
    content_id: str = Query(..., description="Title id"),
    type: str = Query("movie", description="Content type: movie or tv"),
):
    return {"url": build_deep_link(provider, content_id, type)}


@router.get("/streaming-services")
async def list_streaming_services():
    """List the services with a known deep-link format."""
    return {"services": StreamingServiceRegistry.names()}


# --- Views & statistics ---


@router.post("/contents/{content_id}/views", status_code=204)
def record_view(
    content_id: str, stats: StatsService = Depends(get_stats_service)
):
    stats.record_view(content_id)
    return Response(status_code=204)


@router.get("/stats/views", response_model=List[ContentViewStat])
def view_stats(stats: StatsService = Depends(get_stats_service)):
    return stats.view_counts()


@router.get("/stats/types", response_model=List[ContentTypeStat])
def type_stats(stats: StatsService = Depends(get_stats_service)):
    return stats.type_counts()
