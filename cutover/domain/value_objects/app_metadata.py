from __future__ import annotations
from dataclasses import dataclass

STARTED = "STARTED"


@dataclass(frozen=True)
class AppMetadata:
    """
    Value Object holding what the remote system reports about an application.
    """
    name: str
    state: str = ""

    @property
    def is_started(self) -> bool:
        return self.state.upper() == STARTED


@dataclass(frozen=True)
class Route:
    """
    Value Object for a route bound to an application (host.domain).
    """
    host: str
    domain: str

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("Route host cannot be empty")
        if not self.domain:
            raise ValueError("Route domain cannot be empty")

    def __str__(self) -> str:
        return f"{self.host}.{self.domain}"

    @staticmethod
    def parse(url: str) -> "Route":
        """
        Parses 'host.domain', optionally with a scheme, port or path, into a Route.
        """
        value = url.strip()
        if "://" in value:
            value = value.split("://", 1)[1]
        value = value.split("/", 1)[0]
        value = value.split(":", 1)[0]
        if "." not in value:
            raise ValueError(f"Route has no domain: {url!r}")
        host, domain = value.split(".", 1)
        return Route(host=host, domain=domain)
