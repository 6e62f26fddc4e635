from __future__ import annotations

from fastapi.testclient import TestClient

from travel_events.analytics.store import clear_events
from travel_events.app import app, get_jitter_source
from travel_events.recommendations.catalog import EventCatalog, get_catalog
from travel_events.recommendations.scorer import NoJitter
from travel_events.storage.likes import get_likes_store
from travel_events.storage.reviews import get_reviews_store

app.dependency_overrides[get_jitter_source] = NoJitter

client = TestClient(app)


def _reset():
    get_likes_store().clear()
    get_reviews_store().clear()
    clear_events()


def _like(user_id: str, event_id: str):
    return client.post("/api/likes", json={"userId": user_id, "eventId": event_id})


# ── Public endpoints ─────────────────────────────────────────────────────


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_status_reports_catalog():
    resp = client.get("/api/status")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "API is working"
    assert body["catalog"]["events"] > 0


def test_metadata_lists_countries_and_categories():
    body = client.get("/api/metadata").json()
    assert "Japan" in body["countries"]
    assert "Food & Drink" in body["categories"]


def test_events_filtered_by_country():
    resp = client.get("/api/events", params={"country": "italy"})
    events = resp.json()["events"]
    assert events
    assert all(e["country"] == "Italy" for e in events)
    assert "ratingCount" in events[0]


# ── Likes ────────────────────────────────────────────────────────────────


class TestLikes:
    def test_like_then_repeat(self):
        _reset()
        resp = _like("u1", "rec_jp_001")
        assert resp.status_code == 201
        body = resp.json()
        assert body["liked"] is True
        assert body["like"]["userId"] == "u1"
        assert body["like"]["eventId"] == "rec_jp_001"

        resp = _like("u1", "rec_jp_001")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Event already liked"
        assert len(get_likes_store().find_by_user("u1")) == 1

    def test_check_liked(self):
        _reset()
        _like("u1", "rec_jp_001")
        resp = client.get("/api/likes", params={"userId": "u1", "eventId": "rec_jp_001"})
        assert resp.json() == {"success": True, "liked": True}
        resp = client.get("/api/likes", params={"userId": "u1", "eventId": "rec_jp_002"})
        assert resp.json()["liked"] is False

    def test_list_likes(self):
        _reset()
        _like("u1", "rec_jp_001")
        _like("u1", "rec_jp_002")
        _like("u2", "rec_jp_002")
        user_likes = client.get("/api/likes", params={"userId": "u1"}).json()["likes"]
        assert [like["eventId"] for like in user_likes] == ["rec_jp_002", "rec_jp_001"]
        assert len(client.get("/api/likes").json()["likes"]) == 3

    def test_unlike(self):
        _reset()
        _like("u1", "rec_jp_001")
        resp = client.delete("/api/likes", params={"userId": "u1", "eventId": "rec_jp_001"})
        assert resp.status_code == 200
        assert resp.json()["liked"] is False

    def test_unlike_missing_is_404(self):
        _reset()
        resp = client.delete("/api/likes", params={"userId": "u1", "eventId": "rec_jp_001"})
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Like not found"}

    def test_unlike_requires_both_fields(self):
        resp = client.delete("/api/likes", params={"userId": "u1"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_like_requires_both_fields(self):
        resp = client.post("/api/likes", json={"userId": "u1"})
        assert resp.status_code == 400
        assert "eventId" in resp.json()["error"]


# ── Reviews ──────────────────────────────────────────────────────────────


class TestReviews:
    def test_create_and_list_reviews(self):
        _reset()
        resp = client.post("/api/reviews", json={
            "eventId": "rec_it_001",
            "rating": 5,
            "review": "Best pasta ever",
            "userName": "u1",
        })
        assert resp.status_code == 201
        review = resp.json()["review"]
        assert review["rating"] == 5
        assert review["userName"] == "u1"
        assert "createdAt" in review

        client.post("/api/reviews", json={"eventId": "rec_it_002", "rating": 3, "userName": "u2"})
        by_event = client.get("/api/reviews", params={"eventId": "rec_it_001"}).json()["reviews"]
        assert len(by_event) == 1
        assert len(client.get("/api/reviews").json()["reviews"]) == 2

    def test_review_text_is_optional(self):
        _reset()
        resp = client.post("/api/reviews", json={"eventId": "rec_it_001", "rating": "4", "userName": "u1"})
        assert resp.status_code == 201
        assert resp.json()["review"]["review"] == ""

    def test_rating_out_of_range_rejected(self):
        resp = client.post("/api/reviews", json={"eventId": "rec_it_001", "rating": 6, "userName": "u1"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_missing_user_name_rejected(self):
        resp = client.post("/api/reviews", json={"eventId": "rec_it_001", "rating": 4})
        assert resp.status_code == 400
        assert "userName" in resp.json()["error"]


# ── Recommendations ──────────────────────────────────────────────────────


class TestRecommendations:
    def test_missing_user_id(self):
        resp = client.get("/api/recommendations")
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Missing required field: userId"}

    def test_no_likes_yet(self):
        _reset()
        resp = client.get("/api/recommendations", params={"userId": "newcomer"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["recommendations"] == []
        assert body["message"]
        assert "userPreferences" not in body

    def test_ranked_recommendations_for_country(self):
        _reset()
        _like("u1", "rec_jp_001")
        resp = client.get("/api/recommendations", params={"userId": "u1", "country": "Japan"})
        assert resp.status_code == 200
        body = resp.json()
        ids = [e["id"] for e in body["recommendations"]]
        assert ids == ["rec_jp_003", "rec_jp_002", "jp_tokyo_002", "jp_kyoto_002"]
        assert body["totalLikes"] == 1
        prefs = body["userPreferences"]
        assert prefs["categories"] == {"Food & Drink": 1}
        assert prefs["cities"] == {"Tokyo": 1}
        assert prefs["indoorOutdoor"] == {"indoor": 1, "outdoor": 0}
        assert "recommendationScore" not in body["recommendations"][0]

    def test_liked_events_excluded(self):
        _reset()
        for event_id in ("rec_jp_001", "rec_it_001", "rec_fr_001"):
            _like("u1", event_id)
        resp = client.get("/api/recommendations", params={"userId": "u1", "limit": 50})
        ids = {e["id"] for e in resp.json()["recommendations"]}
        assert ids
        assert not ids & {"rec_jp_001", "rec_it_001", "rec_fr_001"}

    def test_respects_limit(self):
        _reset()
        _like("u1", "rec_jp_001")
        resp = client.get("/api/recommendations", params={"userId": "u1", "limit": 3})
        assert len(resp.json()["recommendations"]) == 3

    def test_limit_above_maximum_rejected(self):
        resp = client.get("/api/recommendations", params={"userId": "u1", "limit": 500})
        assert resp.status_code == 400

    def test_unknown_country_falls_back(self):
        _reset()
        _like("u1", "rec_jp_001")
        resp = client.get("/api/recommendations", params={"userId": "u1", "country": "Atlantis"})
        assert len(resp.json()["recommendations"]) == 10

    def test_reviews_feed_average_rating(self):
        _reset()
        _like("u1", "rec_jp_001")
        client.post("/api/reviews", json={"eventId": "rec_jp_001", "rating": 5, "userName": "u1"})
        client.post("/api/reviews", json={"eventId": "rec_jp_002", "rating": 3, "userName": "u1"})
        prefs = client.get("/api/recommendations", params={"userId": "u1"}).json()["userPreferences"]
        assert prefs["avgRating"] == 4.0
        assert prefs["totalReviews"] == 2


# ── Analytics ────────────────────────────────────────────────────────────


def test_analytics_tracks_requests_and_actions():
    _reset()
    client.get("/api/recommendations", params={"userId": "u1"})
    _like("u1", "rec_jp_001")
    _like("u2", "rec_jp_001")
    client.delete("/api/likes", params={"userId": "u2", "eventId": "rec_jp_001"})
    client.post("/api/reviews", json={"eventId": "rec_jp_001", "rating": 4, "userName": "u1"})
    client.get("/api/recommendations", params={"userId": "u1", "country": "Japan"})

    body = client.get("/api/analytics").json()
    assert body["total_recommendation_requests"] == 2
    assert body["no_likes_rate"] == 50.0
    assert body["top_countries"] == [{"name": "Japan", "count": 1}]
    assert body["actions"] == {"likes": 2, "unlikes": 1, "reviews": 1}
    assert body["top_liked_events"] == [{"event_id": "rec_jp_001", "count": 2}]


def test_analytics_empty_initially():
    _reset()
    body = client.get("/api/analytics").json()
    assert body["total_recommendation_requests"] == 0
    assert body["avg_response_time_ms"] == 0.0


# ── Numeric ids and error rendering ──────────────────────────────────────


def test_like_and_review_accept_numeric_event_ids():
    _reset()
    resp = client.post("/api/likes", json={"userId": "u1", "eventId": 2})
    assert resp.status_code == 201
    assert resp.json()["like"]["eventId"] == "2"
    assert get_likes_store().exists("u1", "2")

    resp = client.post("/api/reviews", json={"eventId": 2, "rating": 4, "userName": "u1"})
    assert resp.status_code == 201
    assert resp.json()["review"]["eventId"] == "2"


class BrokenCatalog:
    def find_all(self, country=None):
        raise RuntimeError("disk on fire")


def test_missing_catalog_is_503(tmp_path):
    app.dependency_overrides[get_catalog] = lambda: EventCatalog(tmp_path / "missing")
    try:
        resp = client.get("/api/events")
    finally:
        app.dependency_overrides.pop(get_catalog)
    assert resp.status_code == 503
    assert resp.json()["success"] is False
    assert "not found" in resp.json()["error"]


def test_unexpected_error_is_500():
    app.dependency_overrides[get_catalog] = BrokenCatalog
    try:
        resp = TestClient(app, raise_server_exceptions=False).get("/api/events")
    finally:
        app.dependency_overrides.pop(get_catalog)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Internal server error"}
