import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from headshots.config.settings import settings
from headshots.core.rate_limit import limiter
from headshots.core.session_store import session_store
from headshots.modules.auth import routes as auth_routes
from headshots.modules.profiles import routes as profiles_routes
from headshots.modules.astria import routes as astria_routes
from headshots.modules.tunes import routes as tunes_routes
from headshots.modules.training import routes as training_routes
from headshots.modules.training import registry as training_registry
from headshots.modules.reactions import routes as reactions_routes
from headshots.modules.notifications import routes as notifications_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
# Applies the default limit to every route without its own @limiter.limit
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


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


app.add_middleware(SecurityHeadersMiddleware)
cors_origins = settings.get_cors_origins_list()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # Browsers reject credentials with a wildcard origin
    allow_credentials="*" not in cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    max_age=86400,
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(profiles_routes.router, prefix="/api/v1")
app.include_router(astria_routes.router, prefix="/api/v1")
app.include_router(tunes_routes.router, prefix="/api/v1")
app.include_router(tunes_routes.images_router, prefix="/api/v1")
app.include_router(training_routes.router, prefix="/api/v1")
app.include_router(reactions_routes.router, prefix="/api/v1")
app.include_router(notifications_routes.router, prefix="/api/v1")


def _log_session_event(event: str, user_data: dict) -> None:
    logger.debug(f"Session {event} for user {user_data.get('id')}")


_unsubscribe_session_log = None


@app.on_event("startup")
async def startup_event():
    global _unsubscribe_session_log
    logger.info("Application startup")
    _unsubscribe_session_log = session_store.subscribe(_log_session_event)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")
    if _unsubscribe_session_log is not None:
        _unsubscribe_session_log()
    training_registry.reset()


@app.get("/")
async def root():
    return {"message": "Welcome to ai-headshots", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: reports which providers are configured."""
    return {
        "status": "ready",
        "supabase": bool(settings.supabase_url),
        "astria": bool(settings.astria_api_key),
        "openai": bool(settings.openai_api_key),
        "resend": bool(settings.resend_api_key),
    }
