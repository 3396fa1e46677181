"""
Log Tail Module

Architectural Intent:
- Best-effort background tail of an application's logs while it starts
- Fire-and-forget: never blocks, delays or fails the step it runs alongside
- Torn down unconditionally when the surrounding block exits
"""

from __future__ import annotations
import asyncio
import contextlib
import logging
import re
import sys
from typing import Callable, Optional
from cutover.domain.ports.remote_operations_port import RemoteOperationsPort

logger = logging.getLogger(__name__)

# staging output is already printed by the push itself
_STAGING_LINE = re.compile(r"\[STG/")


def _write_stderr(line: str) -> None:
    sys.stderr.write(line + "\n")


class LogTail:
    def __init__(
        self,
        remote: RemoteOperationsPort,
        app_name: str,
        sink: Callable[[str], None] = _write_stderr,
    ) -> None:
        self.remote = remote
        self.app_name = app_name
        self.sink = sink
        self._task: Optional[asyncio.Task] = None

    async def _consume(self) -> None:
        try:
            async for line in self.remote.stream_logs(self.app_name):
                if _STAGING_LINE.search(line):
                    continue
                self.sink(line)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("error reading logs: %s", e)

    async def __aenter__(self) -> "LogTail":
        self._task = asyncio.create_task(self._consume())
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
