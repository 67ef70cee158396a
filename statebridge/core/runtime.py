"""
StateBridge Core Runtime.

Builds the FastAPI application: configuration, logging, state client,
middleware, exception handlers, routes and health check.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse

from .config_manager import ConfigManager, StateBridgeConfig
from .error_handlers import register_exception_handlers
from .logging_config import setup_logging, get_logger
from .middleware import CorrelationMiddleware
from ..services.account import router as account_router
from ..state import StateClient, StateService

logger = get_logger(__name__)


class StateBridgeRuntime:
    """
    Core runtime for StateBridge.

    Owns the loaded configuration, the state service and the FastAPI app.
    """

    def __init__(self):
        self._config_manager = ConfigManager()
        self._config: Optional[StateBridgeConfig] = None
        self._state_service: Optional[StateService] = None
        self._app: Optional[FastAPI] = None
        self._start_time: Optional[float] = None

    def initialize(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        *,
        config: Optional[StateBridgeConfig] = None,
        state_service: Optional[StateService] = None,
        configure_logging: bool = True,
    ) -> FastAPI:
        """
        Initialize the runtime and build the application.

        Args:
            config_file: Path to configuration file
            cli_overrides: CLI argument overrides
            config: Ready-made configuration (skips loading)
            state_service: State service to use instead of the sidecar client
            configure_logging: Whether to install logging handlers

        Returns:
            The configured FastAPI application

        Raises:
            ValidationError: If configuration is invalid
        """
        if self._app is not None:
            logger.info("Runtime already initialized, skipping")
            return self._app

        self._config = config or self._config_manager.load(
            config_file=config_file,
            cli_overrides=cli_overrides
        )

        if configure_logging:
            setup_logging(self._config.logging)

        logger.info(f"StateBridge v{self._config.version} initializing")

        self._state_service = state_service or StateClient.from_config(self._config.state)

        self._app = self._create_fastapi_app()
        self._register_health_endpoint()
        self._start_time = time.time()

        logger.info("StateBridge runtime initialization complete")
        return self._app

    def _create_fastapi_app(self) -> FastAPI:
        """Create and configure FastAPI application."""
        app = FastAPI(
            title="StateBridge",
            description="HTTP façade over a sidecar key-value state store",
            version=self._config.version if self._config else "0.1.0",
            docs_url="/docs",
            redoc_url="/redoc"
        )
        app.state.state_service = self._state_service
        app.add_middleware(CorrelationMiddleware)
        register_exception_handlers(app)
        app.include_router(account_router)

        logger.debug("FastAPI application created")
        return app

    def _register_health_endpoint(self) -> None:
        """Register health check endpoint."""
        if not self._app:
            raise RuntimeError("FastAPI app not initialized")

        @self._app.get("/health", status_code=status.HTTP_200_OK)
        async def health_check() -> JSONResponse:
            """Health check endpoint."""
            return JSONResponse(content=self.get_health_status())

        logger.debug("Health check endpoint registered at /health")

    def get_health_status(self) -> Dict[str, Any]:
        """
        Get current health status.

        Reports only the local process; the sidecar is not probed.
        """
        if not self._config:
            return {
                "status": "unhealthy",
                "version": "unknown",
                "uptime": 0,
                "message": "Runtime not initialized"
            }

        uptime = int(time.time() - self._start_time) if self._start_time else 0
        return {
            "status": "healthy",
            "version": self._config.version,
            "state_endpoint": self._config.state.endpoint,
            "uptime": uptime,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @property
    def app(self) -> FastAPI:
        if self._app is None:
            raise RuntimeError("Runtime not initialized. Call initialize() first.")
        return self._app

    @property
    def config(self) -> StateBridgeConfig:
        if self._config is None:
            raise RuntimeError("Runtime not initialized. Call initialize() first.")
        return self._config


def create_app(
    config: Optional[StateBridgeConfig] = None,
    state_service: Optional[StateService] = None,
    config_file: Optional[str] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Application factory (also used by ``uvicorn --factory``)."""
    runtime = StateBridgeRuntime()
    return runtime.initialize(
        config_file=config_file,
        config=config,
        state_service=state_service,
        configure_logging=configure_logging,
    )
