"""Catalog models for movies and TV shows."""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ContentType(str, Enum):
    """Catalog entry kind."""

    MOVIE = "movie"
    TV = "tv"


class ImportSource(str, Enum):
    """Where an imported entry's data came from."""

    LIVE = "live"
    FALLBACK = "fallback"


class CatalogModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WatchProvider(CatalogModel):
    """A streaming service where the content can be watched."""

    id: str = ""
    name: str
    logo_path: str = ""
    url: str = ""
    redirect_link: Optional[str] = None


class CastMember(CatalogModel):
    """A credited cast member."""

    id: str = ""
    name: str
    character: str = ""
    profile_path: Optional[str] = None


class Episode(CatalogModel):
    """An episode in a TV season."""

    id: str = ""
    title: str
    overview: str = ""
    episode_number: int
    still_path: Optional[str] = None
    air_date: Optional[str] = None
    duration: Optional[str] = None
    rating: Optional[float] = None


class Season(CatalogModel):
    """A season of a TV show."""

    id: str = ""
    name: str
    season_number: int
    episode_count: int = 0
    poster_path: Optional[str] = None
    air_date: Optional[str] = None
    overview: Optional[str] = None
    episodes: List[Episode] = []


class ContentImage(CatalogModel):
    """A gallery image."""

    path: str
    type: Literal["poster", "backdrop"]


class EmbedVideo(CatalogModel):
    """An embeddable video (trailer, clip, featurette)."""

    url: str
    title: str = ""


class Content(CatalogModel):
    """A movie or TV show with all of its catalog metadata."""

    id: str = ""
    title: str
    overview: str = ""
    poster_path: str = ""
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    type: ContentType
    genres: List[str] = []
    rating: float = 0.0
    duration: Optional[str] = None  # e.g., "2h 28m"
    status: Optional[str] = None  # e.g., "Released", "Ended"
    trailer_url: Optional[str] = None
    watch_providers: List[WatchProvider] = []
    cast: List[CastMember] = []
    seasons: List[Season] = []
    images: List[ContentImage] = []
    embed_videos: List[EmbedVideo] = []
    updated_at: Optional[datetime] = None

    @field_validator("rating", mode="before")
    @classmethod
    def default_rating(cls, v):
        return 0.0 if v is None else v

    @field_validator("genres", mode="before")
    @classmethod
    def default_genres(cls, v):
        return [] if v is None else v


class ImportedContent(Content):
    """Content assembled by the TMDB importer, not yet persisted."""

    source: ImportSource


class Category(CatalogModel):
    """A named group of content, materialized per request."""

    id: str
    name: str
    contents: List[Content] = []
