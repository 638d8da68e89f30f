"""Main service class for the Tourney API."""

import asyncio
import logging
from typing import Optional

from aiohttp import web

from tourney_api.config import Config
from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.adapters.http import create_app
from tourney_api.adapters.observability import initialize_metrics, shutdown_metrics


logger = logging.getLogger(__name__)


class TourneyAPIService:
    """Main service class that runs the HTTP API on top of the database.

    The service directly manages its infrastructure components without a
    dependency injection framework.
    """

    def __init__(self, config: Config, database_manager: Optional[DatabaseManager] = None):
        """Initialize the Tourney API service.

        Args:
            config: Service configuration
            database_manager: Optional database manager for dependency injection.
                              If not provided, one is created from config.
        """
        self.config = config
        self._running = False
        self._stopped = asyncio.Event()

        # Infrastructure components
        self._database_manager: Optional[DatabaseManager] = None
        self._runner: Optional[web.AppRunner] = None
        self._metrics_provider = None

        # Provided dependencies
        self._provided_database_manager = database_manager

    @property
    def is_running(self) -> bool:
        return self._running

    async def _initialize_infrastructure(self) -> None:
        """Initialize metrics and the database."""
        self._metrics_provider = initialize_metrics(self.config)

        if self._provided_database_manager is not None:
            self._database_manager = self._provided_database_manager
        else:
            self._database_manager = DatabaseManager(self.config)
            await self._database_manager.initialize()

        if self.config.auto_create_tables:
            await self._database_manager.create_tables()

    async def _start_http_server(self) -> None:
        """Start the aiohttp server."""
        logger.info("Starting HTTP server...")

        app = create_app(self._database_manager)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.config.http_host, self.config.http_port)
        await site.start()

        logger.info(f"HTTP server listening on {self.config.http_host}:{self.config.http_port}")

    async def start(self) -> None:
        """Start the service and serve until stop() is called."""
        logger.info("Starting Tourney API service")
        self._running = True
        self._stopped.clear()

        try:
            await self._initialize_infrastructure()
            await self._start_http_server()
            await self._stopped.wait()
        except Exception:
            self._running = False
            raise

    async def stop(self) -> None:
        """Stop the service and release its resources."""
        if not self._running and self._runner is None and self._database_manager is None:
            return

        logger.info("Stopping Tourney API service")
        self._running = False
        self._stopped.set()

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        # Only close what this service created
        if self._database_manager is not None and self._provided_database_manager is None:
            await self._database_manager.close()
        self._database_manager = None

        shutdown_metrics()
        logger.info("Tourney API service stopped")
