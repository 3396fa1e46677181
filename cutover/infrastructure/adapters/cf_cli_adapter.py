"""
Cloud Foundry CLI Adapter

Architectural Intent:
- Infrastructure adapter implementing RemoteOperationsPort via the cf CLI
- Runs cf locally through invoke, or on a jump host through Fabric/SSH
- Blocking CLI calls are wrapped in the default executor so the port stays async

Existence Policy:
- Apps are looked up by name and current space GUID through cf curl
- total_results must be present and numeric, else the query fails
- Resources are only counted when their space_guid matches the current space;
  an app exists when exactly one resource matches

Security:
- Every argument is quoted via shlex.quote() before reaching the shell
- SSH connections use connect_timeout, allow_agent, look_for_keys
"""

from __future__ import annotations
import asyncio
import functools
import json
import logging
import re
import shlex
from typing import AsyncIterator, Optional, Union
from urllib.parse import quote_plus
from fabric import Connection
from invoke import Context
from cutover.domain.errors import RemoteError
from cutover.domain.ports.remote_operations_port import RemoteOperationsPort
from cutover.domain.value_objects.app_metadata import AppMetadata, Route
from cutover.infrastructure.config import CFConfig

logger = logging.getLogger(__name__)

_SPACE_RE = re.compile(r"^space:[ \t]*(\S.*?)[ \t]*$", re.MULTILINE | re.IGNORECASE)
_ROUTES_RE = re.compile(r"^(?:routes|urls):[ \t]*(.*?)[ \t]*$", re.MULTILINE | re.IGNORECASE)


def parse_apps_response(raw: str, space_guid: str) -> tuple[int, list[dict]]:
    """
    Parses a /v2/apps query answer into (match count, matching entities).

    Without a resources list only total_results is available, so the count is
    taken from it and no entities are returned.
    """
    try:
        output = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RemoteError(f"Invalid JSON in api response: {e}") from e

    if not isinstance(output, dict) or "total_results" not in output:
        raise RemoteError("Missing total_results from api response")

    total = output["total_results"]
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        raise RemoteError(f"total_results didn't have a number {total}")

    resources = output.get("resources")
    if not isinstance(resources, list):
        return int(total), []

    entities = [
        r["entity"]
        for r in resources
        if isinstance(r, dict)
        and isinstance(r.get("entity"), dict)
        and r["entity"].get("space_guid") == space_guid
    ]
    return len(entities), entities


class CloudFoundryCliAdapter(RemoteOperationsPort):
    """Adapter implementing RemoteOperationsPort via the cf CLI."""

    def __init__(self, config: Optional[CFConfig] = None) -> None:
        self.config = config or CFConfig()
        self._space_guid: Optional[str] = None

    def _get_runner(self) -> Union[Connection, Context]:
        if self.config.ssh_host:
            return Connection(
                host=self.config.ssh_host,
                user=self.config.ssh_user,
                port=self.config.ssh_port,
                connect_timeout=30,
                connect_kwargs={
                    "allow_agent": True,
                    "look_for_keys": True,
                },
            )
        return Context()

    def _command(self, *args: str) -> str:
        return " ".join(shlex.quote(a) for a in (self.config.binary, *args))

    def _run_sync(self, *args: str, hide: bool = True) -> str:
        cmd = self._command(*args)
        options = {"hide": hide, "warn": True, "in_stream": False}
        if self.config.command_timeout:
            options["timeout"] = self.config.command_timeout

        logger.debug("Running %s", cmd)
        try:
            result = self._get_runner().run(cmd, **options)
        except Exception as e:
            raise RemoteError(f"cf {args[0]} failed: {e}") from e

        if result.failed:
            detail = (result.stderr or result.stdout or "").strip()
            raise RemoteError(
                f"cf {args[0]} exited with {result.exited}: {detail}"
            )
        return result.stdout

    async def _run(self, *args: str, hide: bool = True) -> str:
        return await asyncio.get_running_loop().run_in_executor(
            None, functools.partial(self._run_sync, *args, hide=hide)
        )

    async def rename_application(self, old_name: str, new_name: str) -> None:
        await self._run("rename", old_name, new_name)

    async def push_application(
        self,
        name: str,
        manifest_path: Optional[str],
        app_path: Optional[str],
        no_start: bool = False,
    ) -> None:
        args = ["push", name]
        if manifest_path:
            args += ["-f", manifest_path]
        if app_path:
            args += ["-p", app_path]
        if no_start:
            args.append("--no-start")
        await self._run(*args, hide=False)

    async def start_application(self, name: str) -> None:
        await self._run("start", name, hide=False)

    async def stop_application(self, name: str) -> None:
        await self._run("stop", name)

    async def delete_application(self, name: str) -> None:
        await self._run("delete", name, "-f")

    async def list_applications(self) -> None:
        await self._run("apps", hide=False)

    async def current_space_guid(self) -> str:
        if self._space_guid is None:
            target = await self._run("target")
            m = _SPACE_RE.search(target)
            if not m:
                raise RemoteError("No space targeted, use 'cf target -s' first")
            guid = (await self._run("space", m.group(1), "--guid")).strip()
            if not guid:
                raise RemoteError(f"Could not resolve GUID of space {m.group(1)}")
            self._space_guid = guid
        return self._space_guid

    async def _query_app(self, name: str) -> tuple[int, list[dict]]:
        space_guid = await self.current_space_guid()
        path = f"/v2/apps?q=name:{quote_plus(name)}&q=space_guid:{space_guid}"
        raw = await self._run("curl", path)
        return parse_apps_response(raw, space_guid)

    async def does_app_exist(self, name: str) -> bool:
        count, _ = await self._query_app(name)
        return count == 1

    async def get_app_metadata(self, name: str) -> Optional[AppMetadata]:
        count, entities = await self._query_app(name)
        if count != 1:
            return None
        if not entities:
            raise RemoteError(f"No resources describing {name} in api response")
        return AppMetadata(name=name, state=str(entities[0].get("state", "")))

    async def get_route(self, name: str) -> Route:
        output = await self._run("app", name)
        m = _ROUTES_RE.search(output)
        routes = [r.strip() for r in m.group(1).split(",")] if m else []
        routes = [r for r in routes if r]
        if not routes:
            raise RemoteError(f"{name} has no routes")
        try:
            return Route.parse(routes[0])
        except ValueError as e:
            raise RemoteError(str(e)) from e

    async def map_route(self, name: str, host: str, domain: str) -> None:
        await self._run("map-route", name, domain, "--hostname", host)

    async def unmap_route(self, name: str, host: str, domain: str) -> None:
        await self._run("unmap-route", name, domain, "--hostname", host)

    async def stream_logs(self, name: str) -> AsyncIterator[str]:
        if self.config.ssh_host:
            raise RemoteError("Log streaming is only available when cf runs locally")

        try:
            proc = await asyncio.create_subprocess_exec(
                self.config.binary,
                "logs",
                name,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as e:
            raise RemoteError(f"{self.config.binary} not found") from e

        try:
            while True:
                line = await proc.stdout.readline()
                if not line:
                    break
                yield line.decode(errors="replace").rstrip("\n")
        finally:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
