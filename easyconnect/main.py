import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from easyconnect import __version__
from easyconnect.config import settings, Settings
from easyconnect.core.middleware import SecurityHeadersMiddleware
from easyconnect.modules.auth import routes as auth_routes
from easyconnect.modules.group_types import routes as group_types_routes
from easyconnect.modules.groups import routes as groups_routes
from easyconnect.modules.members import routes as members_routes
from easyconnect.modules.invites import routes as invites_routes
from easyconnect.modules.contacts import routes as contacts_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

ROUTERS = [
    auth_routes.router,
    group_types_routes.router,
    groups_routes.router,
    members_routes.router,
    invites_routes.router,
    contacts_routes.router,
]


def supabase_configured(app_settings: Settings) -> bool:
    return bool(app_settings.supabase_url and app_settings.supabase_key)


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the API with its limiter, middleware and routers"""
    limiter = Limiter(key_func=get_remote_address, default_limits=[app_settings.rate_limit])
    application = FastAPI(
        title=app_settings.app_name,
        version=__version__,
        debug=app_settings.debug,
        redirect_slashes=False,
    )
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @application.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        detail = "Internal server error" if app_settings.is_production else str(exc)
        return JSONResponse(status_code=500, content={"detail": detail})

    # Last added runs first: CORS, then security headers, then the limiter
    application.add_middleware(SlowAPIMiddleware)
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in ROUTERS:
        application.include_router(router, prefix="/api/v1")

    @application.on_event("startup")
    async def startup():
        logger.info(f"{app_settings.app_name} {__version__} starting ({app_settings.environment})")
        if not supabase_configured(app_settings):
            logger.warning("SUPABASE_URL / SUPABASE_KEY not set; data calls will fail")

    @application.get("/")
    async def root():
        return {"message": f"Welcome to {app_settings.app_name}", "status": "healthy"}

    @application.get("/health")
    @limiter.exempt
    async def health():
        return {"status": "healthy"}

    @application.get("/ready")
    @limiter.exempt
    async def ready():
        """Ready once the Supabase connection is configured"""
        if not supabase_configured(app_settings):
            return JSONResponse(status_code=503, content={"status": "not ready", "detail": "Supabase is not configured"})
        return {"status": "ready"}

    return application


app = create_app()
