"""Virtual-host dispatch.

Every request is classified by an explicit, ordered rule table:

1. global path rules (``/status``, ``/favicon.ico``, ...) match on path
   alone, whatever the host;
2. host rules are tried top to bottom and the first match wins;
3. anything else is ``NOT_FOUND``.

Loopback aliases (``localhost:<port>``, ``127.0.0.1:<port>``) are part of
every site's host set so each site is reachable during local development.
Because the first matching rule wins, a loopback request goes to the earliest
site whose path predicate accepts it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence, Union


class SiteId(str, Enum):
    COUNTDOWN = "countdown"
    GIT = "git"
    IP = "ip"
    STATUS = "status"
    FAVICON = "favicon"
    METRICS = "metrics"


class RouteMiss:
    """Distinguished "no rule matched" outcome."""

    _instance: Optional["RouteMiss"] = None

    def __new__(cls) -> "RouteMiss":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = RouteMiss()

RouteOutcome = Union[SiteId, RouteMiss]


def normalize_host(host: Optional[str]) -> Optional[str]:
    if host is None:
        return None
    value = host.strip().lower()
    return value or None


def normalize_path(path: Optional[str]) -> str:
    value = (path or "").split("?", 1)[0]
    if not value.startswith("/"):
        value = "/" + value
    return value


@dataclass(frozen=True)
class PathRule:
    site: SiteId
    path: str

    def matches(self, host: Optional[str], path: str) -> bool:
        return path == self.path


@dataclass(frozen=True)
class HostRule:
    site: SiteId
    hosts: frozenset[str]
    # None accepts any path
    paths: Optional[frozenset[str]] = None

    @classmethod
    def build(
        cls,
        site: SiteId,
        hosts: Iterable[str],
        paths: Optional[Iterable[str]] = None,
    ) -> "HostRule":
        normalized = frozenset(h for h in (normalize_host(x) for x in hosts) if h)
        return cls(site=site, hosts=normalized, paths=frozenset(paths) if paths is not None else None)

    def matches(self, host: Optional[str], path: str) -> bool:
        if host is None or host not in self.hosts:
            return False
        return self.paths is None or path in self.paths


@dataclass(frozen=True)
class VirtualHostRouter:
    global_rules: Sequence[PathRule] = field(default_factory=tuple)
    host_rules: Sequence[HostRule] = field(default_factory=tuple)

    def route(self, host: Optional[str], path: str) -> RouteOutcome:
        host = normalize_host(host)
        path = normalize_path(path)
        for rule in self.global_rules:
            if rule.matches(host, path):
                return rule.site
        for rule in self.host_rules:
            if rule.matches(host, path):
                return rule.site
        return NOT_FOUND

    def rules_for(self, site: SiteId) -> list[Union[PathRule, HostRule]]:
        return [r for r in (*self.global_rules, *self.host_rules) if r.site is site]


COUNTDOWN_PATHS = ("/", "/dates/end")


def build_router(settings) -> VirtualHostRouter:
    loopback = tuple(settings.loopback_hosts)

    global_rules = [
        PathRule(SiteId.STATUS, "/status"),
        PathRule(SiteId.FAVICON, "/favicon.ico"),
    ]
    if settings.metrics_enabled:
        global_rules.append(PathRule(SiteId.METRICS, "/metrics"))

    host_rules = [
        HostRule.build(SiteId.COUNTDOWN, (*loopback, *settings.countdown_hosts), COUNTDOWN_PATHS),
        HostRule.build(SiteId.GIT, (*loopback, *settings.git_hosts)),
        HostRule.build(SiteId.IP, (*loopback, *settings.ip_hosts)),
    ]
    return VirtualHostRouter(global_rules=tuple(global_rules), host_rules=tuple(host_rules))


__all__ = [
    "COUNTDOWN_PATHS",
    "HostRule",
    "NOT_FOUND",
    "PathRule",
    "RouteMiss",
    "RouteOutcome",
    "SiteId",
    "VirtualHostRouter",
    "build_router",
    "normalize_host",
]
