import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import where2watch.models.tables  # noqa: F401 registers the tables on the metadata
from where2watch.models.content import (
    CastMember,
    Content,
    ContentImage,
    ContentType,
    EmbedVideo,
    Episode,
    Season,
    WatchProvider,
)
from where2watch.services.tmdb import import_cache


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads (TestClient runs in one)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(autouse=True)
def clear_import_cache():
    import_cache.clear()
    yield
    import_cache.clear()


@pytest.fixture
def tv_show():
    """A fully populated TV entry whose nested rows already have ids."""
    poster = "https://image.tmdb.org/t/p/w500/poster.jpg"
    backdrop = "https://image.tmdb.org/t/p/w1280/backdrop.jpg"
    return Content(
        id="show-1",
        title="Dark",
        overview="A family saga with a supernatural twist.",
        poster_path=poster,
        backdrop_path=backdrop,
        release_date="2017-12-01",
        type=ContentType.TV,
        genres=["Drama", "Mystery"],
        rating=8.4,
        duration="55m",
        status="Ended",
        trailer_url="https://www.youtube.com/watch?v=abc",
        watch_providers=[
            WatchProvider(
                id="8",
                name="Netflix",
                logo_path="https://image.tmdb.org/t/p/w92/netflix.jpg",
                url="https://www.netflix.com",
                redirect_link="https://www.netflix.com/title/70023",
            )
        ],
        cast=[
            CastMember(id="cast-1", name="Louis Hofmann", character="Jonas Kahnwald")
        ],
        seasons=[
            Season(
                id="season-1",
                name="Season 1",
                season_number=1,
                episode_count=2,
                episodes=[
                    Episode(id="episode-1-1", title="Secrets", episode_number=1),
                    Episode(
                        id="episode-1-2",
                        title="Lies",
                        episode_number=2,
                        duration="45m",
                        rating=8.1,
                    ),
                ],
            )
        ],
        images=[
            ContentImage(path=poster, type="poster"),
            ContentImage(path=backdrop, type="backdrop"),
        ],
        embed_videos=[EmbedVideo(url="https://www.youtube.com/watch?v=abc", title="Trailer")],
    )


@pytest.fixture
def movie():
    return Content(
        id="movie-1",
        title="Inception",
        overview="A thief who steals corporate secrets through dream-sharing.",
        poster_path="https://image.tmdb.org/t/p/w500/inception.jpg",
        type=ContentType.MOVIE,
        genres=["Action", "Science Fiction"],
        rating=8.4,
        duration="2h 28m",
    )
