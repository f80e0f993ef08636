"""Synthetic import results used when TMDB cannot be reached.

A few well-known titles have realistic canned values; every other id gets
templated values drawn from a RNG seeded with the id and type, so the same
request always produces the same placeholder.
"""

import logging
import random
from typing import List

from where2watch.models.content import (
    ContentImage,
    ContentType,
    Episode,
    ImportedContent,
    ImportSource,
    Season,
    WatchProvider,
)
from where2watch.services.deeplinks import build_deep_link

logger = logging.getLogger(__name__)

IMAGE_BASE = "https://image.tmdb.org/t/p"
PLACEHOLDER_POSTER = "https://via.placeholder.com/500x750?text=No+Image"

# name, logo, homepage
MOCK_PROVIDERS = [
    ("Netflix", "/pbpMk2JmcoNnQwx5JGpXngfoWtp.jpg", "https://www.netflix.com"),
    ("Prime Video", "/emthp39XA2YScoYL1p0sdbAH2WA.jpg", "https://www.primevideo.com"),
    ("Disney+", "/7rwgEs15tFwyR9NPQ5vpzxTj19Q.jpg", "https://www.disneyplus.com"),
    ("Hulu", "/zxrVdFjIjLqkfnwyghnfywTn3Lh.jpg", "https://www.hulu.com"),
    ("Max", "/6Q3ZYUNA9Hsgj6iWnVsw2gR5V6z.jpg", "https://www.max.com"),
    ("Apple TV+", "/6uhKBfmtzFqOcLousHwZuzcrScK.jpg", "https://tv.apple.com"),
]

MOCK_GENRES = {
    ContentType.MOVIE: [
        "Action",
        "Adventure",
        "Comedy",
        "Drama",
        "Thriller",
        "Science Fiction",
    ],
    ContentType.TV: [
        "Drama",
        "Comedy",
        "Crime",
        "Mystery",
        "Sci-Fi & Fantasy",
        "Action & Adventure",
    ],
}

SAMPLE_TITLES = {
    ("550", ContentType.MOVIE): {
        "title": "Fight Club",
        "overview": (
            "A ticking-time-bomb insomniac and a slippery soap salesman channel "
            "primal male aggression into a shocking new form of therapy."
        ),
        "poster": "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
        "backdrop": "/hZkgoQYus5vegHoetLkCJzb17zJ.jpg",
        "release_date": "1999-10-15",
        "genres": ["Drama", "Thriller"],
        "rating": 8.4,
        "duration": "2h 19m",
        "providers": ["Prime Video"],
    },
    ("27205", ContentType.MOVIE): {
        "title": "Inception",
        "overview": (
            "Cobb, a skilled thief who steals secrets from deep within the "
            "subconscious during the dream state, is offered a chance at "
            "redemption: plant an idea instead of stealing one."
        ),
        "poster": "/oYuLEt3zVCKq57qu2F8dT7NIa6f.jpg",
        "backdrop": "/s3TBrRGB1iav7gFOCNx3H31MoES.jpg",
        "release_date": "2010-07-15",
        "genres": ["Action", "Science Fiction", "Adventure"],
        "rating": 8.4,
        "duration": "2h 28m",
        "providers": ["Netflix"],
    },
    ("155", ContentType.MOVIE): {
        "title": "The Dark Knight",
        "overview": (
            "Batman raises the stakes in his war on crime, until a criminal "
            "mastermind known as the Joker throws Gotham into anarchy."
        ),
        "poster": "/qJ2tW6WMUDux911r6m7haRef0WH.jpg",
        "backdrop": "/nMKdUUepR0i5zn0y1T4CsSB5chy.jpg",
        "release_date": "2008-07-16",
        "genres": ["Drama", "Action", "Crime", "Thriller"],
        "rating": 8.5,
        "duration": "2h 32m",
        "providers": ["Max"],
    },
    ("1396", ContentType.TV): {
        "title": "Breaking Bad",
        "overview": (
            "Walter White, a New Mexico chemistry teacher diagnosed with "
            "terminal cancer, turns to manufacturing methamphetamine to secure "
            "his family's future."
        ),
        "poster": "/ggFHVNu6YYI5L9pCfOacjizRGt.jpg",
        "backdrop": "/tsRy63Mu5cu8etL1X7ZLyf7UP1M.jpg",
        "release_date": "2008-01-20",
        "genres": ["Drama", "Crime"],
        "rating": 8.9,
        "duration": "47m",
        "seasons": 5,
        "providers": ["Netflix"],
    },
    ("66732", ContentType.TV): {
        "title": "Stranger Things",
        "overview": (
            "When a young boy disappears, his mother, a police chief and his "
            "friends must confront terrifying supernatural forces in order to "
            "get him back."
        ),
        "poster": "/49WJfeN0moxb9IPfGn8AIqMGskD.jpg",
        "backdrop": "/56v2KjBlU4XaOv9rVYEQypROD7P.jpg",
        "release_date": "2016-07-15",
        "genres": ["Drama", "Sci-Fi & Fantasy", "Mystery"],
        "rating": 8.6,
        "duration": "51m",
        "seasons": 4,
        "providers": ["Netflix"],
    },
}

EPISODES_PER_MOCK_SEASON = 3


def _mock_provider(
    name: str, logo: str, homepage: str, external_id: str, content_type: ContentType
) -> WatchProvider:
    return WatchProvider(
        id=f"mock-{name.lower().replace(' ', '-')}",
        name=name,
        logo_path=f"{IMAGE_BASE}/w92{logo}",
        url=homepage,
        redirect_link=build_deep_link(name, external_id, content_type),
    )


def _mock_seasons(count: int) -> List[Season]:
    seasons = []
    for number in range(1, count + 1):
        episodes = [
            Episode(
                id=f"episode-{number}-{ep}",
                title=f"Episode {ep}",
                episode_number=ep,
            )
            for ep in range(1, EPISODES_PER_MOCK_SEASON + 1)
        ]
        seasons.append(
            Season(
                id=f"season-{number}",
                name=f"Season {number}",
                season_number=number,
                episode_count=len(episodes),
                episodes=episodes,
            )
        )
    return seasons


def build_fallback_content(
    external_id: str, content_type: ContentType
) -> ImportedContent:
    """Build a usable placeholder for ``external_id``. Never raises."""
    rng = random.Random(f"{external_id}:{content_type.value}")
    by_name = {p[0]: p for p in MOCK_PROVIDERS}
    sample = SAMPLE_TITLES.get((external_id, content_type))

    if sample is not None:
        poster = f"{IMAGE_BASE}/w500{sample['poster']}"
        backdrop = f"{IMAGE_BASE}/w1280{sample['backdrop']}"
        fields = {
            "title": sample["title"],
            "overview": sample["overview"],
            "poster_path": poster,
            "backdrop_path": backdrop,
            "release_date": sample["release_date"],
            "genres": list(sample["genres"]),
            "rating": sample["rating"],
            "duration": sample["duration"],
            "images": [
                ContentImage(path=poster, type="poster"),
                ContentImage(path=backdrop, type="backdrop"),
            ],
        }
        providers = [by_name[name] for name in sample["providers"]]
        season_count = sample.get("seasons", 1)
    else:
        kind = "Movie" if content_type == ContentType.MOVIE else "Series"
        fields = {
            "title": f"Sample {kind} #{external_id}",
            "overview": (
                f"Placeholder details for TMDB {content_type.value} {external_id}; "
                "live metadata was unavailable at import time."
            ),
            "poster_path": PLACEHOLDER_POSTER,
            "release_date": f"{rng.randint(1995, 2024)}-01-01",
            "genres": rng.sample(MOCK_GENRES[content_type], 2),
            "rating": round(rng.uniform(5.5, 8.5), 1),
            "duration": f"{rng.randint(1, 2)}h {rng.randint(0, 59)}m"
            if content_type == ContentType.MOVIE
            else f"{rng.randint(22, 60)}m",
            "images": [ContentImage(path=PLACEHOLDER_POSTER, type="poster")],
        }
        providers = rng.sample(MOCK_PROVIDERS, rng.randint(1, 3))
        season_count = 1

    logger.info(
        "Built fallback content for %s %s (%s)",
        content_type.value,
        external_id,
        fields["title"],
    )
    return ImportedContent(
        id=f"tmdb-{external_id}-{content_type.value}",
        type=content_type,
        status="Released" if content_type == ContentType.MOVIE else "Returning Series",
        watch_providers=[
            _mock_provider(name, logo, homepage, external_id, content_type)
            for name, logo, homepage in providers
        ],
        seasons=_mock_seasons(season_count) if content_type == ContentType.TV else [],
        source=ImportSource.FALLBACK,
        **fields,
    )
