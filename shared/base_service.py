"""
Base service class for the map locations service.
"""

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Dict, Optional
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
import os

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import ServiceException


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, port: int, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.config = config or get_config(service_name, port)
        self.port = self.config.port
        self.logger = get_logger(f"{service_name}.service")
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        configure_logging(service_name, self.config.log_level)

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"Map Locations - {self.service_name.title()} Service",
            version="1.0.0",
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
            lifespan=self._lifespan,
        )

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Run service start/stop hooks around the serving lifetime."""
        await self.start()
        try:
            yield
        finally:
            await self.stop()

    def _setup_middleware(self):
        """Set up middleware."""

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.env == "local" else [],
            allow_credentials=True,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

        @self.app.middleware("http")
        async def add_request_timing(request: Request, call_next):
            start_time = time.time()
            request_id = set_request_id(request.headers.get("X-Request-ID"))

            try:
                response = await call_next(request)
                duration = time.time() - start_time

                self.metrics.record_http_request(
                    method=request.method,
                    endpoint=request.url.path,
                    status_code=response.status_code,
                    duration=duration
                )

                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(duration * 1000, 2)
                )

                response.headers["X-Request-ID"] = request_id
                return response
            finally:
                clear_context()

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            try:
                dependencies = await self._check_dependencies()
            except Exception as e:
                self.logger.error("Health check failed", error=str(e))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={
                        "service": self.service_name,
                        "status": "error",
                        "error": str(e)
                    }
                )

            status = "ok" if all(value == "ok" for value in dependencies.values()) else "degraded"
            self.metrics.record_health_check(status)

            return {
                "service": self.service_name,
                "status": status,
                "uptime_seconds": self._get_uptime(),
                "dependencies": dependencies,
                "version": "1.0.0",
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(self.metrics.registry),
                media_type=CONTENT_TYPE_LATEST
            )

        @self.app.exception_handler(ServiceException)
        async def service_exception_handler(request: Request, exc: ServiceException):
            """Handle ServiceException."""
            self.logger.error(
                "Service error",
                code=exc.code,
                message=exc.message,
                details=exc.details
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": {}
                }
            )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check service dependencies. Override in subclasses."""
        return {}

    async def start(self):
        """Start service components. Override in subclasses."""

    async def stop(self):
        """Stop service components. Override in subclasses."""

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
