"""Deep links from a provider name to a title on that provider."""

import re

from where2watch.models.content import ContentType
from where2watch.providers import StreamingServiceRegistry, register_service
from where2watch.providers.streaming_services import DEFAULT_SERVICES

for _service_cls in DEFAULT_SERVICES:
    register_service(_service_cls())

# TMDB lists the same service as "Vudu (Rent)", "Netflix basic with Ads", ...
_OFFER_SUFFIX = re.compile(r"\s*\((rent|buy)\)$")
_ADS_SUFFIX = re.compile(r"\s+(basic|standard|premium)?\s*with ads$")
_WHITESPACE = re.compile(r"\s+")


def clean_provider_name(provider_name: str) -> str:
    """Lowercase a provider name and drop offer and ad-tier suffixes."""
    name = _WHITESPACE.sub(" ", (provider_name or "").strip().lower())
    name = _OFFER_SUFFIX.sub("", name)
    return _ADS_SUFFIX.sub("", name).strip()


def web_fallback_url(provider_name: str) -> str:
    """Best-effort homepage guess: ``https://www.{name without spaces}.com``.

    Built from the name exactly as listed, offer suffixes included.
    """
    slug = _WHITESPACE.sub("", (provider_name or "").lower())
    return f"https://www.{slug}.com"


def build_deep_link(provider_name: str, content_id: str, content_type) -> str:
    """Return a link opening ``content_id`` on the named provider.

    Known services get their own link format; anything else gets the web
    fallback. A blank provider name links to the TMDB page of the title.
    Any type other than movie is linked as TV.
    """
    if getattr(content_type, "value", content_type) == ContentType.MOVIE.value:
        content_type = ContentType.MOVIE
    else:
        content_type = ContentType.TV
    cleaned = clean_provider_name(provider_name)
    # A blank name would give "https://www..com"; the TMDB page is used instead
    if not cleaned:
        return f"https://www.themoviedb.org/{content_type.value}/{content_id}"

    service = StreamingServiceRegistry.match(cleaned)
    if service is None:
        return web_fallback_url(provider_name)
    return service.build_link(str(content_id), content_type)
