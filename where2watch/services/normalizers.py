"""Coercion of loosely typed JSON columns into lists.

Values come either from the ``contents`` table (JSON text) or straight from
TMDB payloads (already parsed). Every normalizer returns a list and never
raises; malformed input is logged and counted in ``normalization_failures``.
"""

import json
import logging
from collections import Counter
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

# Field name -> number of values replaced by the fallback list
normalization_failures: Counter = Counter()


def _record_failure(field: str, reason: str) -> None:
    normalization_failures[field] += 1
    logger.warning("Could not normalize %s (%s), using fallback", field, reason)


def normalize(raw: Any, fallback: Optional[List] = None, field: str = "value") -> List:
    """Coerce ``raw`` into a list.

    ``None`` and blank strings give ``fallback``, lists are returned as-is,
    strings are parsed as JSON and anything else falls back.
    """
    if fallback is None:
        fallback = []
    if raw is None:
        return fallback
    if isinstance(raw, list):
        return raw
    if isinstance(raw, str):
        if not raw.strip():
            return fallback
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            _record_failure(field, f"invalid JSON: {exc}")
            return fallback
        if isinstance(parsed, list):
            return parsed
        _record_failure(field, f"expected a JSON array, got {type(parsed).__name__}")
        return fallback

    _record_failure(field, f"unsupported type {type(raw).__name__}")
    return fallback


def normalize_watch_providers(raw: Any) -> List:
    return normalize(raw, [], field="watch_providers")


def normalize_cast(raw: Any) -> List:
    return normalize(raw, [], field="cast")


def normalize_seasons(raw: Any) -> List:
    return normalize(raw, [], field="seasons")


def normalize_images(raw: Any) -> List:
    return normalize(raw, [], field="images")


def normalize_embed_videos(raw: Any) -> List:
    return normalize(raw, [], field="embed_videos")
