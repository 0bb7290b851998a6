from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from mono.apps.web.app import create_app
from mono.core.settings import get_settings
from mono.domain.countdown import CountdownMetrics
from mono.domain.errors import ConfigError

COUNTDOWN = "http://ugh.kominick.com"
LOOPBACK = "http://127.0.0.1:3003"


@pytest.fixture
def settings():
    return replace(get_settings(), version="abc123")


@pytest.fixture
def web_app(settings, clock, now):
    countdown = CountdownMetrics.from_settings(settings, clock=clock, now=now)
    return create_app(settings, countdown=countdown)


def _client(app, base_url: str) -> TestClient:
    return TestClient(app, base_url=base_url)


@pytest.mark.parametrize("base_url", ["http://example.com", COUNTDOWN, LOOPBACK, "http://git.jaemk.me"])
def test_status_on_any_host(web_app, base_url):
    with _client(web_app, base_url) as client:
        response = client.get("/status")

    assert response.status_code == 200
    assert response.json() == {"version": "abc123", "ok": "ok"}


def test_favicon_on_any_host(web_app):
    with _client(web_app, "http://git.jaemk.me") as client:
        response = client.get("/favicon.ico")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/gif"
    assert response.content.startswith(b"GIF89a")


def test_favicon_missing_is_not_found(settings, tmp_path):
    app = create_app(replace(settings, static_dir=tmp_path))
    with _client(app, COUNTDOWN) as client:
        assert client.get("/favicon.ico").status_code == 404


def test_dates_end_snapshot(web_app):
    with _client(web_app, COUNTDOWN) as client:
        response = client.get("/dates/end")

    assert response.status_code == 200
    assert response.json() == {
        "start": "2021-01-01T00:00:00+00:00",
        "end": "2022-01-01T00:00:00+00:00",
        "days_left": 184,
        "business_days_left": 125,
        "business_days_done": 124,
    }


def test_dates_end_is_byte_identical_within_ttl(web_app, clock):
    with _client(web_app, COUNTDOWN) as client:
        first = client.get("/dates/end").content
        clock.advance(20)
        second = client.get("/dates/end").content

    assert first == second


def test_countdown_plain_text(web_app):
    with _client(web_app, COUNTDOWN) as client:
        response = client.get("/", headers={"accept": "text/plain"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "184d 0h 0m 0s\nbusiness days left: 125\nbusiness days done: 124\n"


def test_countdown_html_when_browser_asks(web_app):
    with _client(web_app, COUNTDOWN) as client:
        response = client.get("/", headers={"accept": "text/HTML,application/xhtml+xml"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "/dates/end" in response.text


def test_countdown_html_missing_page_falls_back_to_text(settings, tmp_path, clock, now):
    settings = replace(settings, static_dir=tmp_path)
    app = create_app(settings, countdown=CountdownMetrics.from_settings(settings, clock=clock, now=now))
    with _client(app, COUNTDOWN) as client:
        response = client.get("/", headers={"accept": "text/html"})

    assert response.status_code == 200
    assert response.text.startswith("184d ")


def test_loopback_serves_countdown_index(web_app):
    with _client(web_app, LOOPBACK) as client:
        response = client.get("/", headers={"accept": "*/*"})

    assert response.text.startswith("184d 0h 0m 0s\n")


def test_git_redirect(web_app):
    with _client(web_app, "http://git.jaemk.me") as client:
        response = client.get("/mono/tree/main?tab=readme", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "https://github.com/jaemk/mono/tree/main?tab=readme"
    assert response.content == b""


def test_git_redirect_root(web_app):
    with _client(web_app, "http://git.jaemk.me") as client:
        response = client.get("/", follow_redirects=False)

    assert response.headers["location"] == "https://github.com/jaemk/"


def test_ip_echo(web_app):
    with _client(web_app, "http://ip.kominick.com") as client:
        echoed = client.get("/", headers={"fly-client-ip": "203.0.113.9"})
        missing = client.get("/")

    assert echoed.text == "203.0.113.9\n"
    assert missing.text == "unknown\n"


def test_unknown_host_is_not_found(web_app):
    with _client(web_app, "http://example.com") as client:
        response = client.get("/")

    assert response.status_code == 404
    assert response.text == "not found\n"


def test_countdown_host_unknown_path_is_not_found(web_app):
    with _client(web_app, COUNTDOWN) as client:
        assert client.get("/secret").status_code == 404


def test_only_get_and_head(web_app):
    with _client(web_app, COUNTDOWN) as client:
        assert client.post("/dates/end").status_code == 405
        assert client.head("/status").status_code == 200


def test_metrics_route_disabled_by_default(web_app):
    with _client(web_app, "http://example.com") as client:
        assert client.get("/metrics").status_code == 404


def test_metrics_route_when_enabled(settings, clock, now):
    settings = replace(settings, metrics_enabled=True)
    app = create_app(settings, countdown=CountdownMetrics.from_settings(settings, clock=clock, now=now))
    with _client(app, COUNTDOWN) as client:
        client.get("/dates/end")
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "cache_lookups_total" in response.text
    assert "http_requests_total" in response.text


def test_invalid_configuration_prevents_startup(monkeypatch):
    monkeypatch.setenv("END_DATE", "tomorrow")
    get_settings.cache_clear()
    with pytest.raises(ConfigError, match="END_DATE"):
        create_app()
