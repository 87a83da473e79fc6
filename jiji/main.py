import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address

from jiji.config.settings import Settings
from jiji.core.exceptions import register_exception_handlers
from jiji.core.schemas import ApiResponse
from jiji.database.supabase_client import SupabaseClients
from jiji.modules.ask_jiji import routes as ask_jiji_routes

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


class RequestLoggingMiddleware:
    """Logs method, path, status and duration; tags each request with an X-Request-ID."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        request_id = headers.get(b"x-request-id", b"").decode("latin-1") or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        started = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                message.setdefault("headers", [])
                message["headers"].append((b"X-Request-ID", request_id.encode("latin-1")))
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s -> %d (%.1fms) [%s]",
                scope["method"], scope["path"], status_code, elapsed_ms, request_id,
            )


def create_app(settings: Optional[Settings] = None, clients: Optional[SupabaseClients] = None) -> FastAPI:
    """Build the application with explicitly constructed settings and Supabase clients."""
    settings = settings or Settings()
    configure_logging(settings)
    clients = clients or SupabaseClients.from_settings(settings)
    availability = clients.availability

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Application startup: %s on port %d (environment=%s, mode=%s, query logging %s)",
            settings.app_name, settings.port, settings.environment, availability.mode,
            "enabled" if availability.admin else "disabled",
        )
        yield
        logger.info("Application shutdown")

    # Storage for the per-route limit applied by enforce_rate_limit
    limiter = Limiter(
        key_func=get_remote_address,
        enabled=settings.rate_limit_enabled,
    )
    app = FastAPI(
        title="Learn with Jiji",
        debug=settings.debug,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clients = clients
    app.state.limiter = limiter

    register_exception_handlers(app, is_production=settings.is_production)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(ask_jiji_routes.router)

    @app.get("/health", response_model=ApiResponse[dict], response_model_exclude_none=True)
    async def health():
        return ApiResponse(data={
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        })

    @app.get("/ready", response_model=ApiResponse[dict], response_model_exclude_none=True)
    async def ready():
        """Readiness probe: reports which Supabase capabilities are configured."""
        return ApiResponse(data={
            "status": "ready",
            "mode": availability.mode,
            "database": availability.database,
            "admin": availability.admin,
        })

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = app.state.settings
    # uvicorn stops accepting connections and drains on SIGINT/SIGTERM
    uvicorn.run(
        "jiji.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
