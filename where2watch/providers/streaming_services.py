"""Link formats of the major streaming services.

All links are web URLs the service apps claim as universal links, so they
open the app where it is installed and the website otherwise.
"""

from typing import Tuple

from where2watch.models.content import ContentType
from where2watch.providers.base import StreamingService


class Netflix(StreamingService):
    @property
    def name(self) -> str:
        return "Netflix"

    def build_link(self, content_id: str, content_type: ContentType) -> str:
        return f"https://www.netflix.com/title/{content_id}"


class PrimeVideo(StreamingService):
    @property
    def name(self) -> str:
        return "Prime Video"

    @property
    def aliases(self) -> Tuple[str, ...]:
        return ("prime video", "amazon prime video", "amazon video")

    def build_link(self, content_id: str, content_type: ContentType) -> str:
        return f"https://www.primevideo.com/detail/{content_id}"


class DisneyPlus(StreamingService):
    @property
    def name(self) -> str:
        return "Disney+"

    @property
    def aliases(self) -> Tuple[str, ...]:
        return ("disney+", "disney plus")

    def build_link(self, content_id: str, content_type: ContentType) -> str:
        section = "movies" if content_type == ContentType.MOVIE else "series"
        return f"https://www.disneyplus.com/{section}/{content_id}"


class Hulu(StreamingService):
    @property
    def name(self) -> str:
        return "Hulu"

    def build_link(self, content_id: str, content_type: ContentType) -> str:
        section = "movie" if content_type == ContentType.MOVIE else "series"
        return f"https://www.hulu.com/{section}/{content_id}"


class Max(StreamingService):
    """HBO Max, renamed Max."""

    @property
    def name(self) -> str:
        return "Max"

    @property
    def aliases(self) -> Tuple[str, ...]:
        return ("max", "hbo max")

    def build_link(self, content_id: str, content_type: ContentType) -> str:
        section = "movie" if content_type == ContentType.MOVIE else "show"
        return f"https://play.max.com/{section}/{content_id}"


class AppleTVPlus(StreamingService):
    @property
    def name(self) -> str:
        return "Apple TV+"

    @property
    def aliases(self) -> Tuple[str, ...]:
        return ("apple tv+", "apple tv plus", "apple tv")

    def build_link(self, content_id: str, content_type: ContentType) -> str:
        section = "movie" if content_type == ContentType.MOVIE else "show"
        return f"https://tv.apple.com/{section}/{content_id}"


DEFAULT_SERVICES = (Netflix, PrimeVideo, DisneyPlus, Hulu, Max, AppleTVPlus)
