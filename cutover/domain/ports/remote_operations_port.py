"""
Remote Operations Port

Architectural Intent:
- Port interface for the remote application platform (Cloud Foundry)
- Defines the small vocabulary of operations a rollout is built from
- Implemented by adapters (cf CLI, in-memory doubles, etc.)

Every method raises RemoteError on failure; success is a normal return.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional
from cutover.domain.value_objects.app_metadata import AppMetadata, Route


class RemoteOperationsPort(ABC):
    """
    Port interface for renaming, pushing, deleting, starting, stopping and
    routing remote applications, plus the queries planning depends on.
    """

    @abstractmethod
    async def rename_application(self, old_name: str, new_name: str) -> None:
        pass

    @abstractmethod
    async def push_application(
        self,
        name: str,
        manifest_path: Optional[str],
        app_path: Optional[str],
        no_start: bool = False,
    ) -> None:
        pass

    @abstractmethod
    async def start_application(self, name: str) -> None:
        pass

    @abstractmethod
    async def stop_application(self, name: str) -> None:
        pass

    @abstractmethod
    async def delete_application(self, name: str) -> None:
        pass

    @abstractmethod
    async def does_app_exist(self, name: str) -> bool:
        """
        True only when exactly one application with this name exists in the
        current space. Zero or several matches both answer False.
        """
        pass

    @abstractmethod
    async def get_app_metadata(self, name: str) -> Optional[AppMetadata]:
        """
        Returns None when the application does not exist (same rule as
        does_app_exist).
        """
        pass

    @abstractmethod
    async def get_route(self, name: str) -> Route:
        """
        Returns the first route bound to the application.
        """
        pass

    async def get_host_name(self, name: str) -> str:
        route = await self.get_route(name)
        return route.host

    @abstractmethod
    async def map_route(self, name: str, host: str, domain: str) -> None:
        pass

    @abstractmethod
    async def unmap_route(self, name: str, host: str, domain: str) -> None:
        pass

    @abstractmethod
    async def list_applications(self) -> None:
        pass

    @abstractmethod
    def stream_logs(self, name: str) -> AsyncIterator[str]:
        """
        Yields log lines of a running application until cancelled.
        """
        pass
