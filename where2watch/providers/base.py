"""Streaming service base class."""

from abc import ABC, abstractmethod
from typing import Tuple

from where2watch.models.content import ContentType


class StreamingService(ABC):
    """A streaming service that can be linked to directly.

    Subclasses declare the provider names they answer to and build a link
    to a title from a content id. Services never perform I/O.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the display name of this service."""
        pass

    @property
    def aliases(self) -> Tuple[str, ...]:
        """Lowercase provider names (as TMDB spells them) mapped to this service."""
        return (self.name.lower(),)

    @abstractmethod
    def build_link(self, content_id: str, content_type: ContentType) -> str:
        """Return a link that opens the title on this service.

        Args:
            content_id: Identifier of the title.
            content_type: Movie or TV, for services with separate paths.
        """
        pass
