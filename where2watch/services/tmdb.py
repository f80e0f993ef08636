"""TMDB importer: fetches a movie or TV show and shapes it into ``Content``.

The details request is required; credits, videos, images, watch providers
and per-season episode lists are fetched concurrently and each one degrades
to empty when it fails or times out. When the details cannot be fetched at
all (or no API key is configured) a synthetic placeholder is returned.
"""

import asyncio
import logging
from typing import Any, List, Optional, Tuple

import niquests
import tmdbsimple as tmdb
from cachetools import TTLCache
from urllib3.util import Retry

from where2watch.core.config import get_settings
from where2watch.core.errors import ValidationError
from where2watch.models.content import (
    CastMember,
    ContentImage,
    ContentType,
    EmbedVideo,
    Episode,
    ImportedContent,
    ImportSource,
    Season,
    WatchProvider,
)
from where2watch.services.deeplinks import build_deep_link, web_fallback_url
from where2watch.services.shaping import merge_cover_images
from where2watch.services.tmdb_fallback import IMAGE_BASE, build_fallback_content

logger = logging.getLogger(__name__)

MAX_CAST = 15
MAX_IMAGES_PER_TYPE = 8
MAX_EMBED_VIDEOS = 5
MAX_WATCH_PROVIDERS = 8
MAX_SEASONS = 10
PROVIDER_OFFERS = ("flatrate", "rent", "buy")


class TMDBError(Exception):
    """Domain exception for TMDB failures."""

    def __init__(self, message: str, original_exception: Exception = None):
        super().__init__(message)
        self.original_exception = original_exception


import_cache = TTLCache(maxsize=100, ttl=1800)


def _build_session(settings) -> niquests.Session:
    retry_config = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    session = niquests.Session(retries=retry_config)
    if settings.proxy:
        session.proxies = {"http": settings.proxy, "https": settings.proxy}
    return session


# Initialize TMDB
settings = get_settings()
tmdb.API_KEY = settings.tmdb_api_key
tmdb.REQUESTS_TIMEOUT = settings.tmdb_timeout
tmdb.REQUESTS_SESSION = _build_session(settings)

_API_CLASSES = {ContentType.MOVIE: tmdb.Movies, ContentType.TV: tmdb.TV}


def validate_import_request(external_id, content_type) -> Tuple[str, ContentType]:
    """Check the import arguments before any network access."""
    if isinstance(external_id, int) and not isinstance(external_id, bool):
        external_id = str(external_id)
    if not isinstance(external_id, str) or not external_id.strip():
        raise ValidationError("A TMDB id is required")
    try:
        content_type = ContentType(getattr(content_type, "value", content_type))
    except ValueError:
        raise ValidationError(
            f"Content type must be 'movie' or 'tv', got {content_type!r}"
        )
    return external_id.strip(), content_type


def image_url(path: Optional[str], size: str) -> Optional[str]:
    """Absolute TMDB image URL, or ``None`` when there is no relative path."""
    if not path:
        return None
    return f"{IMAGE_BASE}/{size}{path}"


def format_runtime(minutes: Optional[int]) -> Optional[str]:
    """Format minutes as "2h 28m", or "45m" under an hour."""
    if not minutes or minutes <= 0:
        return None
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def _runtime_minutes(details: dict, content_type: ContentType) -> Optional[int]:
    if content_type == ContentType.MOVIE:
        return details.get("runtime")
    run_times = details.get("episode_run_time") or []
    if run_times:
        return run_times[0]
    last_episode = details.get("last_episode_to_air") or {}
    return last_episode.get("runtime")


def parse_cast(credits: dict) -> List[CastMember]:
    cast = []
    for person in (credits.get("cast") or [])[:MAX_CAST]:
        cast.append(
            CastMember(
                id=str(person.get("id", "")),
                name=person.get("name", "Unknown"),
                character=person.get("character") or "",
                profile_path=image_url(person.get("profile_path"), "w185"),
            )
        )
    return cast


def parse_images(details: dict, images: dict) -> List[ContentImage]:
    """Primary poster/backdrop first, then the gallery; deduped and capped."""
    posters = [image_url(details.get("poster_path"), "w500")]
    posters += [
        image_url(p.get("file_path"), "w500") for p in images.get("posters") or []
    ]
    backdrops = [image_url(details.get("backdrop_path"), "w1280")]
    backdrops += [
        image_url(b.get("file_path"), "w1280") for b in images.get("backdrops") or []
    ]

    def capped(paths: List[Optional[str]], image_type: str) -> List[ContentImage]:
        unique = [
            ContentImage(path=p, type=image_type) for p in dict.fromkeys(paths) if p
        ]
        return unique[:MAX_IMAGES_PER_TYPE]

    return capped(posters, "poster") + capped(backdrops, "backdrop")


def _youtube_videos(videos: dict) -> List[dict]:
    return [
        v
        for v in videos.get("results") or []
        if v.get("site") == "YouTube" and v.get("key")
    ]


def pick_trailer_url(videos: dict) -> Optional[str]:
    for video in _youtube_videos(videos):
        if video.get("type") == "Trailer":
            return f"https://www.youtube.com/watch?v={video['key']}"
    return None


def parse_embed_videos(videos: dict) -> List[EmbedVideo]:
    return [
        EmbedVideo(
            url=f"https://www.youtube.com/watch?v={video['key']}",
            title=video.get("name") or "",
        )
        for video in _youtube_videos(videos)[:MAX_EMBED_VIDEOS]
    ]


def parse_watch_providers(
    payload: dict, external_id: str, content_type: ContentType, region: str
) -> List[WatchProvider]:
    """Union of subscription, rent and buy offers for one region."""
    block = (payload.get("results") or {}).get(region) or {}
    region_link = block.get("link")

    providers: List[WatchProvider] = []
    seen = set()
    for offer in PROVIDER_OFFERS:
        for entry in block.get(offer) or []:
            provider_id = entry.get("provider_id")
            name = entry.get("provider_name")
            if provider_id is None or not name or provider_id in seen:
                continue
            seen.add(provider_id)
            providers.append(
                WatchProvider(
                    id=str(provider_id),
                    name=name,
                    logo_path=image_url(entry.get("logo_path"), "w92") or "",
                    url=region_link or web_fallback_url(name),
                    redirect_link=build_deep_link(name, external_id, content_type),
                )
            )
    return providers[:MAX_WATCH_PROVIDERS]


def parse_episode(episode: dict, season_pos: int, episode_pos: int) -> Episode:
    number = episode.get("episode_number") or episode_pos
    return Episode(
        id=f"episode-{season_pos}-{episode_pos}",
        title=episode.get("name") or f"Episode {number}",
        overview=episode.get("overview") or "",
        episode_number=number,
        still_path=image_url(episode.get("still_path"), "w300"),
        air_date=episode.get("air_date"),
        duration=format_runtime(episode.get("runtime")),
        rating=episode.get("vote_average"),
    )


def parse_season(summary: dict, detail: dict, season_pos: int) -> Season:
    """Build a season from its summary and (possibly empty) detail payload."""
    number = summary["season_number"]
    episodes = [
        parse_episode(ep, season_pos, episode_pos)
        for episode_pos, ep in enumerate(detail.get("episodes") or [], start=1)
    ]
    return Season(
        id=f"season-{season_pos}",
        name=summary.get("name") or f"Season {number}",
        season_number=number,
        episode_count=len(episodes) or summary.get("episode_count", 0),
        poster_path=image_url(summary.get("poster_path"), "w500"),
        air_date=summary.get("air_date"),
        overview=summary.get("overview") or detail.get("overview") or None,
        episodes=episodes,
    )


def _fetch_details_sync(external_id: str, content_type: ContentType) -> dict:
    """Fetch the details payload (synchronous)."""
    api = _API_CLASSES[content_type](external_id)
    try:
        return api.info(language=get_settings().tmdb_language)
    except Exception as exc:
        logger.error(
            "Failed to fetch %s details for ID %s: %s",
            content_type.value,
            external_id,
            exc,
        )
        raise TMDBError(
            f"Failed to fetch {content_type.value} details for ID {external_id}", exc
        )


def _fetch_facet_sync(external_id: str, content_type: ContentType, facet: str) -> dict:
    """Fetch one sub-resource (credits, videos, images, watch_providers)."""
    api = _API_CLASSES[content_type](external_id)
    kwargs = {"include_image_language": "en,null"} if facet == "images" else {}
    try:
        return getattr(api, facet)(**kwargs)
    except Exception as exc:
        raise TMDBError(f"Failed to fetch {facet} for ID {external_id}", exc)


def _fetch_season_sync(external_id: str, season_number: int) -> dict:
    """Fetch episodes for a specific season (synchronous)."""
    season_api = tmdb.TV_Seasons(external_id, season_number)
    try:
        return season_api.info(language=get_settings().tmdb_language)
    except Exception as exc:
        raise TMDBError(
            f"Failed to fetch season episodes for ID {external_id} S{season_number}",
            exc,
        )


async def _in_thread(func, *args) -> Any:
    timeout = get_settings().tmdb_timeout
    return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)


async def _optional(label: str, func, *args) -> dict:
    """Run a non-essential fetch; failures degrade to an empty payload."""
    try:
        return await _in_thread(func, *args) or {}
    except asyncio.TimeoutError:
        logger.warning("Timeout fetching %s, continuing without it", label)
        return {}
    except TMDBError as exc:
        logger.warning("%s, continuing without it: %s", exc, exc.original_exception)
        return {}


async def _fetch_seasons(external_id: str, details: dict) -> List[Season]:
    summaries = [
        s for s in details.get("seasons") or [] if (s.get("season_number") or 0) > 0
    ][:MAX_SEASONS]
    payloads = await asyncio.gather(
        *[
            _optional(
                f"season {s['season_number']} of {external_id}",
                _fetch_season_sync,
                external_id,
                s["season_number"],
            )
            for s in summaries
        ]
    )
    return [
        parse_season(summary, payload, pos)
        for pos, (summary, payload) in enumerate(zip(summaries, payloads), start=1)
    ]


async def _import_live(external_id: str, content_type: ContentType) -> ImportedContent:
    details = await _in_thread(_fetch_details_sync, external_id, content_type)
    if not isinstance(details, dict):
        raise TMDBError(f"Malformed details payload for ID {external_id}")
    title = details.get("title") or details.get("name")
    if not title:
        raise TMDBError(f"Malformed details payload for ID {external_id}")

    facets = ("credits", "videos", "images", "watch_providers")
    credits, videos, images, providers = await asyncio.gather(
        *[
            _optional(
                f"{facet} of {content_type.value} {external_id}",
                _fetch_facet_sync,
                external_id,
                content_type,
                facet,
            )
            for facet in facets
        ]
    )
    seasons = (
        await _fetch_seasons(external_id, details)
        if content_type == ContentType.TV
        else []
    )

    poster = image_url(details.get("poster_path"), "w500") or ""
    backdrop = image_url(details.get("backdrop_path"), "w1280")
    release_date = details.get("release_date") or details.get("first_air_date")

    return ImportedContent(
        id=f"tmdb-{external_id}-{content_type.value}",
        title=title,
        overview=details.get("overview") or "",
        poster_path=poster,
        backdrop_path=backdrop,
        release_date=release_date or None,
        type=content_type,
        genres=[g["name"] for g in details.get("genres") or [] if g.get("name")],
        rating=details.get("vote_average") or 0.0,
        duration=format_runtime(_runtime_minutes(details, content_type)),
        status=details.get("status") or None,
        trailer_url=pick_trailer_url(videos),
        watch_providers=parse_watch_providers(
            providers, external_id, content_type, get_settings().watch_region
        ),
        cast=parse_cast(credits),
        seasons=seasons,
        images=merge_cover_images(parse_images(details, images), poster, backdrop),
        embed_videos=parse_embed_videos(videos),
        source=ImportSource.LIVE,
    )


async def import_from_tmdb(external_id, content_type) -> ImportedContent:
    """Import a movie or TV show from TMDB, or a placeholder if that fails.

    Raises:
        ValidationError: if the id is empty or the type is not movie/tv.
    """
    external_id, content_type = validate_import_request(external_id, content_type)
    cache_key = (external_id, content_type.value)
    if cache_key in import_cache:
        return import_cache[cache_key].model_copy(deep=True)

    if not tmdb.API_KEY:
        logger.warning(
            "TMDB API key not configured, using fallback data for %s %s",
            content_type.value,
            external_id,
        )
        return build_fallback_content(external_id, content_type)

    logger.info("Importing %s with TMDB ID %s", content_type.value, external_id)
    try:
        content = await _import_live(external_id, content_type)
    except asyncio.TimeoutError:
        logger.error(
            "Timeout importing %s %s, using fallback data",
            content_type.value,
            external_id,
        )
        return build_fallback_content(external_id, content_type)
    except Exception as exc:
        logger.error(
            "TMDB import of %s %s failed, using fallback data: %s",
            content_type.value,
            external_id,
            exc,
        )
        return build_fallback_content(external_id, content_type)

    import_cache[cache_key] = content
    logger.info("Imported %s: %s", content_type.value, content.title)
    return content.model_copy(deep=True)
