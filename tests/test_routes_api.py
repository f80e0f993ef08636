from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy.exc import OperationalError

from where2watch.core.database import get_session
from where2watch.main import app


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def _payload(title="Inception", content_type="movie", **extra):
    return {
        "title": title,
        "type": content_type,
        "overview": f"{title} overview",
        "posterPath": f"https://image.tmdb.org/t/p/w500/{title.lower()}.jpg",
        "genres": ["Drama"],
        "rating": 8.0,
        **extra,
    }


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_content_crud(client):
    response = client.post("/api/contents", json=_payload())
    assert response.status_code == 201
    created = response.json()
    content_id = created["id"]
    assert created["posterPath"].endswith("inception.jpg")
    assert created["images"] == [{"path": created["posterPath"], "type": "poster"}]

    response = client.get(f"/api/contents/{content_id}")
    assert response.status_code == 200
    assert response.json()["title"] == "Inception"

    response = client.put(
        f"/api/contents/{content_id}", json=_payload(title="Inception (2010)")
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Inception (2010)"

    assert client.delete(f"/api/contents/{content_id}").status_code == 204
    assert client.get(f"/api/contents/{content_id}").status_code == 404


def test_missing_content_is_404(client):
    assert client.get("/api/contents/ghost").status_code == 404
    assert client.put("/api/contents/ghost", json=_payload()).status_code == 404
    assert client.delete("/api/contents/ghost").status_code == 404


def test_put_with_mismatched_id_is_rejected(client):
    content_id = client.post("/api/contents", json=_payload()).json()["id"]

    response = client.put(
        f"/api/contents/{content_id}", json=_payload(id="someone-else")
    )

    assert response.status_code == 400


def test_list_by_type_and_search(client):
    client.post("/api/contents", json=_payload())
    client.post("/api/contents", json=_payload(title="Dark", content_type="tv"))

    movies = client.get("/api/contents", params={"type": "movie"}).json()
    assert [c["title"] for c in movies] == ["Inception"]
    assert len(client.get("/api/contents").json()) == 2
    assert client.get("/api/contents", params={"type": "anime"}).status_code == 400

    hits = client.get("/api/search", params={"q": "DARK"}).json()
    assert [c["title"] for c in hits] == ["Dark"]


def test_categories_and_home(client):
    content_id = client.post("/api/contents", json=_payload()).json()["id"]
    category = client.post("/api/categories", json={"name": "Staff Picks"}).json()

    response = client.post(f"/api/categories/{category['id']}/contents/{content_id}")
    assert response.status_code == 204

    [listed] = client.get("/api/categories").json()
    assert [c["id"] for c in listed["contents"]] == [content_id]

    home = client.get("/api/home").json()
    assert [s["name"] for s in home][0] == "Staff Picks"
    assert "Latest Additions" not in [s["name"] for s in home]

    client.delete(f"/api/categories/{category['id']}/contents/{content_id}")
    home = client.get("/api/home").json()
    assert "Latest Additions" in [s["name"] for s in home]


def test_import_preview_uses_fallback_without_api_key(client):
    with patch("tmdbsimple.API_KEY", None):
        response = client.post(
            "/api/import/tmdb", json={"externalId": 155, "type": "movie"}
        )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "The Dark Knight"
    assert body["source"] == "fallback"
    assert body["watchProviders"][0]["redirectLink"] == (
        "https://play.max.com/movie/155"
    )
    # Previews are not stored
    assert client.get("/api/contents").json() == []


def test_import_rejects_bad_type(client):
    response = client.post(
        "/api/import/tmdb", json={"externalId": "155", "type": "podcast"}
    )
    assert response.status_code == 400


def test_deeplink_and_service_list(client):
    response = client.get(
        "/api/deeplink",
        params={"provider": "Netflix", "content_id": "80057281", "type": "tv"},
    )
    assert response.json() == {"url": "https://www.netflix.com/title/80057281"}

    services = client.get("/api/streaming-services").json()["services"]
    assert "Netflix" in services


def test_views_and_stats(client):
    first = client.post("/api/contents", json=_payload()).json()["id"]
    second = client.post("/api/contents", json=_payload(title="Dark", content_type="tv")).json()["id"]
    for content_id in (first, second, second):
        assert client.post(f"/api/contents/{content_id}/views").status_code == 204

    views = client.get("/api/stats/views").json()
    assert [(v["content_id"], v["view_count"]) for v in views] == [(second, 2), (first, 1)]

    types = client.get("/api/stats/types").json()
    assert types == [{"type": "movie", "count": 1}, {"type": "tv", "count": 1}]

    assert client.post("/api/contents/ghost/views").status_code == 404


def test_admin_pin_gates_writes(client):
    settings = MagicMock(admin_pin=SecretStr("1234"))
    with patch("where2watch.core.auth.get_settings", return_value=settings):
        assert client.post("/api/contents", json=_payload()).status_code == 401
        response = client.post(
            "/api/contents", json=_payload(), headers={"X-Admin-Pin": "0000"}
        )
        assert response.status_code == 401

        response = client.post(
            "/api/contents", json=_payload(), headers={"X-Admin-Pin": "1234"}
        )
        assert response.status_code == 201
        content_id = response.json()["id"]

        # Reads and view tracking stay public
        assert client.get("/api/contents").status_code == 200
        assert client.post(f"/api/contents/{content_id}/views").status_code == 204


def test_missing_categories_and_members_are_404(client):
    content_id = client.post("/api/contents", json=_payload()).json()["id"]
    category_id = client.post("/api/categories", json={"name": "Picks"}).json()["id"]

    assert client.delete("/api/categories/nope").status_code == 404
    assert client.post(f"/api/categories/nope/contents/{content_id}").status_code == 404
    assert client.post(f"/api/categories/{category_id}/contents/nope").status_code == 404
    response = client.delete(f"/api/categories/{category_id}/contents/{content_id}")
    assert response.status_code == 404


def test_storage_failures_stay_500(client, session):
    error = OperationalError("INSERT", {}, Exception("disk full"))
    with patch.object(session, "commit", side_effect=error):
        response = client.post("/api/categories", json={"name": "Picks"})

    assert response.status_code == 500


def test_season_editing(client):
    show = client.post(
        "/api/contents", json=_payload(title="Dark", content_type="tv")
    ).json()
    show_id = show["id"]

    client.post(f"/api/contents/{show_id}/seasons")
    client.post(f"/api/contents/{show_id}/seasons", json={"name": "Finale"})
    response = client.put(
        f"/api/contents/{show_id}/seasons/0/episode-count", json={"count": 4}
    )
    assert response.status_code == 200
    assert response.json()["seasons"][0]["episodeCount"] == 4

    response = client.delete(f"/api/contents/{show_id}/seasons/0/episodes/1")
    episodes = response.json()["seasons"][0]["episodes"]
    assert [e["episodeNumber"] for e in episodes] == [1, 2, 3]
    assert [e["title"] for e in episodes] == ["Episode 1", "Episode 2", "Episode 3"]

    response = client.post(
        f"/api/contents/{show_id}/seasons/1/episodes", json={"title": "The End"}
    )
    assert response.json()["seasons"][1]["episodes"][0]["title"] == "The End"

    response = client.delete(f"/api/contents/{show_id}/seasons/0")
    seasons = response.json()["seasons"]
    assert [(s["seasonNumber"], s["name"]) for s in seasons] == [(1, "Finale")]

    stored = client.get(f"/api/contents/{show_id}").json()
    assert stored["seasons"] == seasons


def test_season_editing_errors(client):
    movie_id = client.post("/api/contents", json=_payload()).json()["id"]
    show_id = client.post(
        "/api/contents", json=_payload(title="Dark", content_type="tv")
    ).json()["id"]

    assert client.post("/api/contents/ghost/seasons").status_code == 404
    assert client.post(f"/api/contents/{movie_id}/seasons").status_code == 400
    assert client.delete(f"/api/contents/{show_id}/seasons/3").status_code == 400
    response = client.put(
        f"/api/contents/{show_id}/seasons/0/episode-count", json={"count": 2}
    )
    assert response.status_code == 400
