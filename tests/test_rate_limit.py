from fastapi.testclient import TestClient

from typecard.core.middleware import SlidingWindow
from typecard.main import create_app


INVALID_CARD_QUERY = "size=huge"


def test_card_endpoint_rate_limited_after_threshold(monkeypatch) -> None:
    """Rate limiter blocks repeated requests to card endpoints."""

    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "1")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "60")
    app = create_app()
    client = TestClient(app)

    first = client.get("/api/cards/type")
    second = client.get("/api/json/octocat/type?tz=Nowhere/City")

    assert first.status_code == 400
    assert second.status_code == 429
    assert second.headers["Retry-After"]


def test_forwarded_for_is_ignored_by_default(monkeypatch) -> None:
    """Spoofed X-Forwarded-For values do not create fresh client windows."""

    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "1")
    app = create_app()
    client = TestClient(app)

    first = client.get("/api/cards/type", headers={"X-Forwarded-For": "203.0.113.10"})
    second = client.get("/api/cards/type", headers={"X-Forwarded-For": "203.0.113.11"})

    assert first.status_code == 400
    assert second.status_code == 429


def test_trusted_forwarded_for_limits_clients_separately(monkeypatch) -> None:
    """Behind a trusted proxy each forwarded address gets its own window."""

    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "1")
    monkeypatch.setenv("TRUST_FORWARDED_FOR", "true")
    app = create_app()
    client = TestClient(app)

    first = client.get("/api/cards/type", headers={"X-Forwarded-For": "203.0.113.10"})
    second = client.get("/api/cards/type", headers={"X-Forwarded-For": "203.0.113.11"})

    assert first.status_code == 400
    assert second.status_code == 400


def test_username_limited_across_clients(monkeypatch) -> None:
    """One GitHub username is capped no matter how many clients ask for it."""

    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "10")
    monkeypatch.setenv("USERNAME_RATE_LIMIT_PER_MINUTE", "1")
    monkeypatch.setenv("TRUST_FORWARDED_FOR", "true")
    app = create_app()
    client = TestClient(app)

    first = client.get(
        f"/api/cards/type?username=octocat&{INVALID_CARD_QUERY}",
        headers={"X-Forwarded-For": "203.0.113.10"},
    )
    same_user = client.get(
        f"/api/json/OctoCat/type?{INVALID_CARD_QUERY}",
        headers={"X-Forwarded-For": "203.0.113.11"},
    )
    other_user = client.get(
        f"/api/cards/type?username=hubot&{INVALID_CARD_QUERY}",
        headers={"X-Forwarded-For": "203.0.113.11"},
    )

    assert first.status_code == 400
    assert same_user.status_code == 429
    assert other_user.status_code == 400


def test_non_card_routes_not_rate_limited(monkeypatch) -> None:
    """Rate limiter does not affect routes outside the card endpoints."""

    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "1")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "60")
    app = create_app()
    client = TestClient(app)

    first = client.get("/health/live")
    second = client.get("/health/live")
    themes = client.get("/api/themes")

    assert first.status_code == 200
    assert second.status_code == 200
    assert themes.status_code == 200


def test_sliding_window_drops_idle_keys() -> None:
    window = SlidingWindow(max_requests=2, window_seconds=60)

    for index in range(50):
        key = f"198.51.100.{index}"
        assert window.retry_after(key, now=1.0) is None
        window.record(key, now=1.0)

    assert len(window) == 50
    assert window.retry_after("198.51.100.200", now=120.0) is None
    assert len(window) == 0


def test_sliding_window_blocks_then_recovers() -> None:
    window = SlidingWindow(max_requests=2, window_seconds=60)
    window.retry_after("client", now=100.0)
    window.record("client", now=100.0)
    window.record("client", now=110.0)

    assert window.retry_after("client", now=120.0) == 40
    assert window.retry_after("client", now=161.0) is None
    assert len(window) == 1
