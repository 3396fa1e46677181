"""
In-Memory Remote Adapter

Architectural Intent:
- RemoteOperationsPort implementation holding applications in a dict
- Records every call in order so rollouts can be asserted step by step
- Failures can be injected per (operation, app name) to drive rewind paths
- Mirrors cf semantics where a rollout depends on them: renames onto a taken
  name fail, deleting a missing app succeeds, pushes replace an app in place
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional
from cutover.domain.errors import RemoteError
from cutover.domain.ports.remote_operations_port import RemoteOperationsPort
from cutover.domain.value_objects.app_metadata import AppMetadata, Route


@dataclass
class InMemoryApp:
    name: str
    state: str = "STARTED"
    routes: list[Route] = field(default_factory=list)
    version: int = 1


class InMemoryRemoteAdapter(RemoteOperationsPort):
    def __init__(self, domain: str = "apps.example.com") -> None:
        self.domain = domain
        self.apps: dict[str, InMemoryApp] = {}
        self.calls: list[tuple] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.duplicates: set[str] = set()
        self.log_lines: list[str] = []
        self.pushes = 0

    # -- test setup --------------------------------------------------------

    def add_app(
        self, name: str, state: str = "STARTED", host: Optional[str] = None
    ) -> InMemoryApp:
        app = InMemoryApp(
            name=name, state=state, routes=[Route(host or name, self.domain)]
        )
        self.apps[name] = app
        return app

    def fail(self, operation: str, name: str, error: Optional[Exception] = None) -> None:
        self.failures[(operation, name)] = error or RemoteError(
            f"{operation} {name} failed"
        )

    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] not in _QUERIES]

    # -- port --------------------------------------------------------------

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        error = self.failures.get((operation, args[0] if args else ""))
        if error is not None:
            raise error

    def _require(self, name: str) -> InMemoryApp:
        app = self.apps.get(name)
        if app is None:
            raise RemoteError(f"App {name} not found")
        return app

    async def rename_application(self, old_name: str, new_name: str) -> None:
        self._record("rename", old_name, new_name)
        app = self._require(old_name)
        if new_name in self.apps:
            raise RemoteError(f"App name {new_name} is already taken")
        del self.apps[old_name]
        app.name = new_name
        self.apps[new_name] = app

    async def push_application(
        self,
        name: str,
        manifest_path: Optional[str],
        app_path: Optional[str],
        no_start: bool = False,
    ) -> None:
        self._record("push", name, manifest_path, app_path, no_start)
        self.pushes += 1
        app = self.apps.get(name) or self.add_app(name)
        app.version = self.pushes + 1
        app.state = "STOPPED" if no_start else "STARTED"

    async def start_application(self, name: str) -> None:
        self._record("start", name)
        self._require(name).state = "STARTED"

    async def stop_application(self, name: str) -> None:
        self._record("stop", name)
        self._require(name).state = "STOPPED"

    async def delete_application(self, name: str) -> None:
        self._record("delete", name)
        self.apps.pop(name, None)

    def _exists(self, name: str) -> bool:
        return name in self.apps and name not in self.duplicates

    async def does_app_exist(self, name: str) -> bool:
        self._record("exists", name)
        return self._exists(name)

    async def get_app_metadata(self, name: str) -> Optional[AppMetadata]:
        self._record("metadata", name)
        if not self._exists(name):
            return None
        return AppMetadata(name=name, state=self.apps[name].state)

    async def get_route(self, name: str) -> Route:
        self._record("route", name)
        app = self._require(name)
        if not app.routes:
            raise RemoteError(f"{name} has no routes")
        return app.routes[0]

    async def map_route(self, name: str, host: str, domain: str) -> None:
        self._record("map-route", name, host, domain)
        app = self._require(name)
        route = Route(host, domain)
        if route not in app.routes:
            app.routes.append(route)

    async def unmap_route(self, name: str, host: str, domain: str) -> None:
        self._record("unmap-route", name, host, domain)
        app = self._require(name)
        app.routes = [r for r in app.routes if r != Route(host, domain)]

    async def list_applications(self) -> None:
        self._record("apps")

    async def stream_logs(self, name: str) -> AsyncIterator[str]:
        self._record("logs", name)
        for line in self.log_lines:
            yield line
        # a real tail only ends when cancelled
        await asyncio.Event().wait()


_QUERIES = {"exists", "metadata", "route", "apps", "logs"}
