import pytest

from mono import __main__ as entrypoint


def _refuse_to_serve(*args, **kwargs):
    pytest.fail("uvicorn.run must not be called with an invalid configuration")


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("END_DATE", "not-a-date"),
        ("END_DATE", "2020-01-01T00:00:00Z"),
        ("PORT", "70000"),
        ("LOG_LEVEL", "VERBOSE"),
    ],
)
def test_main_exits_nonzero_before_serving_on_bad_config(monkeypatch, name, value):
    monkeypatch.setattr(entrypoint.uvicorn, "run", _refuse_to_serve)
    monkeypatch.setenv(name, value)

    assert entrypoint.main() == 1


def test_main_serves_with_configured_bind_address(monkeypatch):
    calls = []
    monkeypatch.setattr(entrypoint.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setenv("PORT", "4004")

    assert entrypoint.main() == 0
    assert calls == [{"host": "localhost", "port": 4004, "log_config": None, "proxy_headers": True}]
