"""Season/episode tree editing with contiguous renumbering.

All functions are pure: they take a list of seasons and return a new one.
Rows added here get random ids, unlike the positional ids assigned on write.
"""

import re
import uuid
from typing import List, Optional

from where2watch.core.errors import ValidationError
from where2watch.models.content import Episode, Season

_DEFAULT_SEASON_NAME = re.compile(r"^Season \d+$")
_DEFAULT_EPISODE_TITLE = re.compile(r"^Episode \d+$")


def _new_id() -> str:
    return uuid.uuid4().hex


def _check_index(items: list, index: int, what: str) -> None:
    if not 0 <= index < len(items):
        raise ValidationError(f"{what} index {index} out of range (0..{len(items) - 1})")


def renumber_episodes(episodes: List[Episode]) -> List[Episode]:
    """Number episodes 1..n in their current order."""
    renumbered = []
    for number, ep in enumerate(episodes, start=1):
        update = {"episode_number": number}
        if _DEFAULT_EPISODE_TITLE.match(ep.title):
            update["title"] = f"Episode {number}"
        renumbered.append(ep.model_copy(update=update))
    return renumbered


def renumber_seasons(seasons: List[Season]) -> List[Season]:
    """Number seasons 1..n in their current order.

    Seasons still carrying a default "Season N" name are renamed to match.
    """
    renumbered = []
    for number, season in enumerate(seasons, start=1):
        update = {"season_number": number}
        if _DEFAULT_SEASON_NAME.match(season.name):
            update["name"] = f"Season {number}"
        renumbered.append(season.model_copy(update=update))
    return renumbered


def add_season(seasons: List[Season], name: Optional[str] = None) -> List[Season]:
    number = len(seasons) + 1
    season = Season(
        id=_new_id(),
        name=name or f"Season {number}",
        season_number=number,
        episode_count=0,
        episodes=[],
    )
    return [*seasons, season]


def remove_season(seasons: List[Season], index: int) -> List[Season]:
    _check_index(seasons, index, "Season")
    return renumber_seasons([s for i, s in enumerate(seasons) if i != index])


def _replace_episodes(season: Season, episodes: List[Episode]) -> Season:
    episodes = renumber_episodes(episodes)
    return season.model_copy(
        update={"episodes": episodes, "episode_count": len(episodes)}
    )


def add_episode(
    seasons: List[Season], season_index: int, title: Optional[str] = None
) -> List[Season]:
    _check_index(seasons, season_index, "Season")
    season = seasons[season_index]
    number = len(season.episodes) + 1
    episode = Episode(
        id=_new_id(),
        title=title or f"Episode {number}",
        episode_number=number,
    )
    updated = list(seasons)
    updated[season_index] = _replace_episodes(season, [*season.episodes, episode])
    return updated


def remove_episode(
    seasons: List[Season], season_index: int, episode_index: int
) -> List[Season]:
    _check_index(seasons, season_index, "Season")
    season = seasons[season_index]
    _check_index(season.episodes, episode_index, "Episode")
    remaining = [ep for i, ep in enumerate(season.episodes) if i != episode_index]
    updated = list(seasons)
    updated[season_index] = _replace_episodes(season, remaining)
    return updated


def set_episode_count(
    seasons: List[Season], season_index: int, count: int
) -> List[Season]:
    """Grow or shrink a season to exactly ``count`` episodes.

    Shrinking drops episodes from the end; growing appends placeholders.
    """
    _check_index(seasons, season_index, "Season")
    if count < 0:
        raise ValidationError("Episode count cannot be negative")
    season = seasons[season_index]
    episodes = list(season.episodes[:count])
    while len(episodes) < count:
        number = len(episodes) + 1
        episodes.append(
            Episode(id=_new_id(), title=f"Episode {number}", episode_number=number)
        )
    updated = list(seasons)
    updated[season_index] = _replace_episodes(season, episodes)
    return updated
