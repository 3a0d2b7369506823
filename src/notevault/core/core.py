from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from notevault.config import Config
from notevault.utils import Clock, now


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from notevault.core.modules.access.service import AccessService  # noqa: PLC0415
    from notevault.core.modules.counter.service import CounterService  # noqa: PLC0415
    from notevault.core.modules.export.service import ExportService  # noqa: PLC0415
    from notevault.core.modules.note.service import NoteService  # noqa: PLC0415
    from notevault.core.modules.reaper.service import ReaperService  # noqa: PLC0415
    from notevault.core.modules.session.service import SessionService  # noqa: PLC0415
    from notevault.core.modules.share.service import ShareService  # noqa: PLC0415
    from notevault.core.modules.user.service import UserService  # noqa: PLC0415

    counter: CounterService
    user: UserService
    session: SessionService
    access: AccessService
    note: NoteService
    share: ShareService
    reaper: ReaperService
    export: ExportService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters: share indexes must exist before the reaper starts sweeping
        service_configs = [
            ("counter", "notevault.core.modules.counter.service", "CounterService"),
            ("user", "notevault.core.modules.user.service", "UserService"),
            ("session", "notevault.core.modules.session.service", "SessionService"),
            ("access", "notevault.core.modules.access.service", "AccessService"),
            ("note", "notevault.core.modules.note.service", "NoteService"),
            ("share", "notevault.core.modules.share.service", "ShareService"),
            ("reaper", "notevault.core.modules.reaper.service", "ReaperService"),
            ("export", "notevault.core.modules.export.service", "ExportService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop services in reverse start order."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, database, clock, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services
    clock: Clock

    def __init__(
        self,
        config: Config,
        mongo_client: AsyncMongoClient[dict[str, Any]] | None = None,
        clock: Clock = now,
    ) -> None:
        """Initialize core with config, MongoDB, and auto-register services.

        A pre-built client may be passed in; the caller then owns it and Core will not close it.
        """
        self.config = config
        self.clock = clock
        self._owns_client = mongo_client is None
        if mongo_client is None:
            mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard", tz_aware=True)
        self.mongo_client = mongo_client
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        if self._owns_client:
            await self.mongo_client.aclose()
