"""Structural fix-ups applied to content before it is written."""

from typing import Iterable, List, Optional

from where2watch.models.content import Content, ContentImage, Season


def merge_cover_images(
    images: Iterable[ContentImage],
    poster_path: Optional[str],
    backdrop_path: Optional[str],
) -> List[ContentImage]:
    """Deduplicate images by path and make sure poster and backdrop are present.

    Existing order is kept; missing covers are appended.
    """
    merged: List[ContentImage] = []
    seen: set[str] = set()
    candidates = list(images)
    if poster_path:
        candidates.append(ContentImage(path=poster_path, type="poster"))
    if backdrop_path:
        candidates.append(ContentImage(path=backdrop_path, type="backdrop"))

    for image in candidates:
        if not image.path or image.path in seen:
            continue
        seen.add(image.path)
        merged.append(image)
    return merged


def fill_season_ids(seasons: List[Season]) -> List[Season]:
    """Assign positional ids to seasons and episodes that have none."""
    filled = []
    for s_idx, season in enumerate(seasons, start=1):
        episodes = [
            ep if ep.id else ep.model_copy(update={"id": f"episode-{s_idx}-{e_idx}"})
            for e_idx, ep in enumerate(season.episodes, start=1)
        ]
        filled.append(
            season.model_copy(
                update={"id": season.id or f"season-{s_idx}", "episodes": episodes}
            )
        )
    return filled


def prepare_for_write(content: Content) -> Content:
    """Return a copy of ``content`` satisfying the stored-shape invariants."""
    cast = [
        member if member.id else member.model_copy(update={"id": f"cast-{idx}"})
        for idx, member in enumerate(content.cast, start=1)
    ]
    providers = [
        provider
        if provider.id
        else provider.model_copy(update={"id": f"provider-{idx}"})
        for idx, provider in enumerate(content.watch_providers, start=1)
    ]
    return content.model_copy(
        update={
            "cast": cast,
            "watch_providers": providers,
            "seasons": fill_season_ids(content.seasons),
            "images": merge_cover_images(
                content.images, content.poster_path, content.backdrop_path
            ),
        }
    )
