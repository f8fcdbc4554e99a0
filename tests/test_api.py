"""Tests for the HTTP endpoints"""
from six_degrees import config
from six_degrees.main import app, get_provider
from six_degrees.models import ActorDetail, DeceasedRecord


def use_provider(provider):
    app.dependency_overrides[get_provider] = lambda: provider


def test_connection_found(client, temp_db, make_provider):
    temp_db.upsert_deceased_persons([
        DeceasedRecord(id=3, name="Three", deathday="1999-09-09", cause_of_death="Heart attack", age_at_death=61)
    ])
    use_provider(make_provider(
        {10: [1, 3], 20: [3, 2]},
        details={3: ActorDetail(id=3, name="Three", deathday="1999-09-09")}
    ))

    response = client.get("/api/connection/1/2")

    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["degrees"] == 2
    assert [s["actor"]["id"] for s in data["path"]] == [1, 3, 2]
    assert [s["movie"]["id"] if s["movie"] else None for s in data["path"]] == [10, 20, None]
    assert data["total_deceased"] == 1
    assert data["deceased_on_path"][0]["cause_of_death"] == "Heart attack"

    history = client.get("/api/searches").json()["searches"]
    assert history[0]["id"] == data["search_id"]
    assert history[0]["path"] == [1, 3, 2]


def test_no_connection_is_not_an_error(client, make_provider):
    use_provider(make_provider({10: [1, 3], 20: [2, 4]}))

    response = client.get("/api/connection/1/2")

    assert response.status_code == 200
    data = response.json()
    assert data["found"] is False
    assert "No connection found within 6 degrees" in data["message"]


def test_timeout_returns_408(client, make_provider, monkeypatch):
    monkeypatch.setattr(config, "SEARCH_TIMEOUT_SECONDS", 0.05)
    use_provider(make_provider({10: [1, 3], 20: [3, 2]}, delay=1.0))

    response = client.get("/api/connection/1/2")

    assert response.status_code == 408
    assert response.json()["success"] is False


def test_invalid_actor_id_rejected(client, make_provider):
    use_provider(make_provider({}))

    assert client.get("/api/connection/abc/2").status_code == 422
    assert client.get("/api/connection/0/2").status_code == 422


def test_actor_search_filters_to_actors(client, make_provider):
    use_provider(make_provider({}, people=[
        {"id": 1, "name": "Actor One", "known_for_department": "Acting", "profile_path": "/1.jpg",
         "known_for": [{"title": "A"}, {"name": "B"}, {"title": "C"}, {"title": "D"}]},
        {"id": 2, "name": "Director Two", "known_for_department": "Directing", "known_for": []},
    ]))

    response = client.get("/api/actors/search", params={"q": "one"})

    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["id"] for r in results] == [1]
    assert results[0]["known_for"] == ["A", "B", "C"]


def test_short_actor_query_returns_nothing(client, make_provider):
    use_provider(make_provider({}, people=[{"id": 1, "name": "X", "known_for_department": "Acting"}]))

    assert client.get("/api/actors/search", params={"q": " a "}).json() == {"results": []}
