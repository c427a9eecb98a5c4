import uuid

from fastapi.testclient import TestClient

from walkdraw.core.config import settings

API = settings.API_V1_STR
PATH = [{"lat": 51.5, "lng": -0.12}, {"lat": 51.51, "lng": -0.13}]


def _create_drawing(client: TestClient, **body) -> str:
    payload = {"email": "owner@x.com", "coordinates": PATH, "isPublic": True, **body}
    r = client.post(f"{API}/drawings/", json=payload)
    assert r.status_code == 201, r.text
    return r.json()["drawingId"]


def test_health_check(client: TestClient):
    r = client.get(f"{API}/utils/health-check/")
    assert r.status_code == 200
    assert r.json() is True


def test_gemini_relay(client: TestClient, fake_llm):
    r = client.post(f"{API}/gemini/", json={"query": "draw a cat"})

    assert r.status_code == 200
    assert r.json() == {"response": fake_llm.reply}
    assert fake_llm.prompts == ["draw a cat"]


def test_gemini_relay_rejects_bad_query(client: TestClient, fake_llm):
    for body in ({}, {"query": 5}, {"query": ""}):
        r = client.post(f"{API}/gemini/", json=body)
        assert r.status_code == 400, body
        assert r.json()["error_code"] == "INVALID_INPUT"
    assert fake_llm.prompts == []


def test_gemini_upstream_failure(client: TestClient, fake_llm):
    fake_llm.fail = True

    r = client.post(f"{API}/gemini/", json={"query": "draw a cat"})

    assert r.status_code == 502
    assert r.json()["error_code"] == "UPSTREAM_ERROR"


def test_distance_accumulates_and_leaderboard_hides_email(client: TestClient):
    r = client.post(f"{API}/distance/", json={"email": "a@x.com", "distance": 5.0, "username": "Ann"})
    assert r.status_code == 201
    assert r.json()["success"] is True
    assert r.json()["totalDistance"] == 5.0

    r = client.post(f"{API}/distance/", json={"email": "a@x.com", "distance": 3})
    assert r.status_code == 200
    assert r.json()["totalDistance"] == 8.0

    r = client.get(f"{API}/distance/leaderboard")
    assert r.status_code == 200
    assert r.json() == [{"username": "Ann", "distance": 8.0}]


def test_distance_rejects_bad_input(client: TestClient):
    for body in (
        {"distance": 5.0},
        {"email": "a@x.com"},
        {"email": "a@x.com", "distance": "5"},
        {"email": 7, "distance": 5.0},
    ):
        r = client.post(f"{API}/distance/", json=body)
        assert r.status_code == 400, body
        assert r.json()["error_code"] == "INVALID_INPUT"


def test_drawing_listing_hides_email(client: TestClient):
    drawing_id = _create_drawing(client, username="Ann", timestamp="2025-01-01T10:00:00Z")

    r = client.get(f"{API}/drawings/", params={"sortBy": "date"})

    assert r.status_code == 200
    [item] = r.json()
    assert item["id"] == drawing_id
    assert item["username"] == "Ann"
    assert item["coordinates"] == PATH
    assert item["voteCount"] == 0
    assert item["isPublic"] is True
    assert "createdAt" in item
    assert "email" not in item


def test_public_listing_excludes_private_drawings(client: TestClient):
    public_id = _create_drawing(client)
    private_id = _create_drawing(client, isPublic=False)

    public = client.get(f"{API}/drawings/", params={"sortBy": "votes"}).json()
    everything = client.get(f"{API}/drawings/", params={"sortBy": "votes", "publicOnly": "false"}).json()

    assert [d["id"] for d in public] == [public_id]
    assert {d["id"] for d in everything} == {public_id, private_id}


def test_listing_rejects_unknown_sort(client: TestClient):
    for params in ({}, {"sortBy": "likes"}):
        r = client.get(f"{API}/drawings/", params=params)
        assert r.status_code == 400
        assert r.json()["error_code"] == "INVALID_INPUT"


def test_drawing_rejects_bad_input(client: TestClient):
    for body in ({"coordinates": PATH}, {"email": "a@x.com"}, {"email": "a@x.com", "coordinates": "nope"}):
        r = client.post(f"{API}/drawings/", json=body)
        assert r.status_code == 400, body


def test_vote_flow(client: TestClient):
    drawing_id = _create_drawing(client)
    vote = {"drawingId": drawing_id, "voterEmail": "v@x.com"}

    r = client.post(f"{API}/drawings/vote", json=vote)
    assert r.status_code == 200
    assert r.json()["success"] is True

    r = client.post(f"{API}/drawings/vote", json=vote)
    assert r.status_code == 409
    assert r.json()["error_code"] == "DUPLICATE_VOTE"

    [item] = client.get(f"{API}/drawings/", params={"sortBy": "votes"}).json()
    assert item["voteCount"] == 1


def test_vote_unknown_drawing(client: TestClient):
    r = client.post(
        f"{API}/drawings/vote", json={"drawingId": str(uuid.uuid4()), "voterEmail": "v@x.com"}
    )
    assert r.status_code == 404
    assert r.json()["error_code"] == "NOT_FOUND"


def test_vote_missing_fields(client: TestClient):
    r = client.post(f"{API}/drawings/vote", json={"drawingId": str(uuid.uuid4())})
    assert r.status_code == 400


def test_team_flow(client: TestClient):
    r = client.post(f"{API}/teams/", json={"teamName": "Walkers", "email": "a@x.com"})
    assert r.status_code == 201
    team_id = r.json()["teamId"]

    r = client.get(f"{API}/teams/", params={"email": "a@x.com"})
    assert r.status_code == 200
    [team] = r.json()
    assert team["id"] == team_id
    assert team["teamName"] == "Walkers"
    assert team["creatorEmail"] == "a@x.com"

    r = client.get(f"{API}/teams/drawings", params={"teamId": team_id})
    assert r.status_code == 200
    assert r.json() == []

    missing_team = str(uuid.uuid4())
    drawing_id = _create_drawing(client, isPublic=False, teamIds=[team_id, missing_team])

    r = client.get(f"{API}/teams/drawings", params={"teamId": team_id})
    assert r.status_code == 200
    assert [d["id"] for d in r.json()] == [drawing_id]
    assert r.json()[0]["isPublic"] is False


def test_team_errors(client: TestClient):
    r = client.post(f"{API}/teams/", json={"teamName": "Walkers"})
    assert r.status_code == 400

    r = client.get(f"{API}/teams/")
    assert r.status_code == 400

    r = client.get(f"{API}/teams/drawings")
    assert r.status_code == 400

    r = client.get(f"{API}/teams/drawings", params={"teamId": str(uuid.uuid4())})
    assert r.status_code == 403
    assert r.json()["error_code"] == "FORBIDDEN"
