from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Optional

from mono.core.env import PROJECT_ROOT, load_env
from mono.core.time_utils import parse_rfc3339
from mono.domain.countdown import DateWindow
from mono.domain.errors import ConfigError


DEFAULT_STATIC_DIR = Path(__file__).resolve().parents[1] / "apps" / "web" / "static"
VERSION_FILE = PROJECT_ROOT / "commit_hash.txt"

DEFAULT_START_DATE = "2021-01-01T00:00:00Z"
DEFAULT_END_DATE = "2022-01-01T00:00:00Z"


@dataclass(frozen=True)
class Settings:
    version: str
    host: str
    port: int
    log_level: str
    log_json: bool
    log_file: str
    window: DateWindow
    countdown_hosts: tuple[str, ...]
    ip_hosts: tuple[str, ...]
    git_hosts: tuple[str, ...]
    git_redirect_base: str
    client_ip_header: str
    static_dir: Path
    metrics_enabled: bool
    business_days_ttl_seconds: float
    business_days_cache_size: int
    snapshot_ttl_seconds: float

    @property
    def start_date(self) -> datetime:
        return self.window.start

    @property
    def end_date(self) -> datetime:
        return self.window.end

    @property
    def bind_address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def loopback_hosts(self) -> tuple[str, ...]:
        return (f"localhost:{self.port}", f"127.0.0.1:{self.port}")


def _get_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _get_float(name: str, default: float, *, minimum: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_hosts(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    hosts = []
    for part in raw.split(","):
        host = part.strip().lower()
        if host and host not in hosts:
            hosts.append(host)
    return tuple(hosts)


def _get_instant(name: str, default: str) -> datetime:
    raw = os.getenv(name, default)
    try:
        return parse_rfc3339(raw)
    except ValueError as exc:
        raise ConfigError(name, raw, str(exc)) from exc


def _get_log_level() -> str:
    raw = os.getenv("LOG_LEVEL", "INFO")
    level = raw.strip().upper() or "INFO"
    # getLevelName maps registered names to their int and anything else to a string
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError("LOG_LEVEL", raw, "unknown log level")
    return level


def _read_version(path: Path = VERSION_FILE) -> str:
    try:
        return path.read_text(encoding="utf-8").strip() or "unknown"
    except FileNotFoundError:
        return "unknown"


load_env()


def load_window() -> DateWindow:
    """Read the configured window, raising ConfigError when it cannot be served."""
    start = _get_instant("START_DATE", DEFAULT_START_DATE)
    end = _get_instant("END_DATE", DEFAULT_END_DATE)
    if start > end:
        raise ConfigError(
            "END_DATE",
            os.getenv("END_DATE", DEFAULT_END_DATE),
            f"end date precedes start date {start.isoformat()}",
        )
    return DateWindow(start=start, end=end)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    port_raw = os.getenv("PORT", "3003").strip()
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ConfigError("PORT", port_raw, "invalid port") from exc
    if not 0 < port < 65536:
        raise ConfigError("PORT", port_raw, "invalid port")

    static_raw = os.getenv("STATIC_DIR", "").strip()
    static_dir = Path(static_raw).expanduser() if static_raw else DEFAULT_STATIC_DIR

    git_redirect_base = os.getenv("GIT_REDIRECT_BASE", "https://github.com/jaemk/").strip()
    if not git_redirect_base.endswith("/"):
        git_redirect_base += "/"

    return Settings(
        version=_read_version(),
        host=os.getenv("HOST", "localhost").strip() or "localhost",
        port=port,
        log_level=_get_log_level(),
        log_json=_get_bool("LOG_JSON", default=False),
        log_file=os.getenv("LOG_FILE", "").strip(),
        window=load_window(),
        countdown_hosts=_get_hosts("COUNTDOWN_HOSTS", "ugh.kominick.com"),
        ip_hosts=_get_hosts("IP_HOSTS", "ip.kominick.com"),
        git_hosts=_get_hosts("GIT_HOSTS", "git.jaemk.me"),
        git_redirect_base=git_redirect_base,
        client_ip_header=os.getenv("CLIENT_IP_HEADER", "fly-client-ip").strip().lower() or "fly-client-ip",
        static_dir=static_dir,
        metrics_enabled=_get_bool("METRICS_ENABLED", default=False),
        business_days_ttl_seconds=_get_float("BUSINESS_DAYS_TTL_SECONDS", 60.0, minimum=0.0),
        business_days_cache_size=_get_int("BUSINESS_DAYS_CACHE_SIZE", 5, minimum=1),
        snapshot_ttl_seconds=_get_float("SNAPSHOT_TTL_SECONDS", 30.0, minimum=0.0),
    )


__all__ = ["Settings", "get_settings", "load_window"]
