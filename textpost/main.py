import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from supabase import Client
from typing import Optional

from textpost.config import Settings, get_settings
from textpost.core.rate_limit import create_limiter
from textpost.database.supabase_client import create_supabase
from textpost.modules.auth import routes as auth_routes
from textpost.modules.posts import routes as posts_routes
from textpost.modules.web.routes import mount_client

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def validation_message(exc: RequestValidationError) -> str:
    """First validation failure as a field-specific message, e.g. 'content is required'"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    if error.get("type") == "json_invalid":
        return "Invalid JSON body"
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = loc[-1] if loc else "body"
    if error.get("type") in ("missing", "string_too_short"):
        return f"{field} is required"
    message = str(error.get("msg", "is invalid"))
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    return f"{field}: {message}"


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
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


class RequestLogMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            logger.info("%s %s", scope["method"], scope["path"])
        await self.app(scope, receive, send)


def create_app(settings: Optional[Settings] = None, supabase: Optional[Client] = None) -> FastAPI:
    """Build the application. Settings and the Supabase client live for the whole process."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.supabase = supabase if supabase is not None else create_supabase(settings)
    limiter = create_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": validation_message(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        if settings.is_production:
            return JSONResponse(status_code=500, content={"error": "Internal server error"})
        return JSONResponse(status_code=500, content={"error": str(exc)})

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestLogMiddleware)

    @app.get("/api/health")
    @limiter.exempt
    async def health():
        return {
            "status": "ok",
            "env": settings.environment,
            "time": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(auth_routes.create_router(settings, limiter), prefix="/api")
    app.include_router(posts_routes.router, prefix="/api")

    # Catch-alls go last
    mount_client(app, settings)

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Application startup ({settings.environment})")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutdown")

    return app
