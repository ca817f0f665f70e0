import logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from hostelmart.auth import TokenService
from hostelmart.config import Settings, get_settings
from hostelmart.cookies import SessionCookieManager
from hostelmart.database import create_db_engine, create_session_factory, init_db
from hostelmart.exceptions import register_exception_handlers
from hostelmart.logging_config import setup_logging
from hostelmart.middleware import RouteGate, RouteGateMiddleware
from hostelmart.routers import auth_router, hostel_router, product_router, user_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application from settings resolved once at startup.

    Everything derived from configuration (signing secret, cookie
    attributes, database engine) is created here and kept on app.state;
    request handlers get it through dependencies.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    # Raises ConfigurationError for a weak secret in production
    token_service = TokenService.from_settings(settings)
    cookie_manager = SessionCookieManager.from_settings(settings)
    engine = create_db_engine(settings.database_url, echo=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.
        Runs on startup and shutdown.
        """
        logger.info(f"Starting HostelMart {VERSION} (environment: {settings.environment})")
        init_db(engine)
        yield
        engine.dispose()

    app = FastAPI(
        title="HostelMart",
        description="Campus hostel marketplace for secondhand items",
        version=VERSION,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.token_service = token_service
    app.state.cookie_manager = cookie_manager
    app.state.session_factory = create_session_factory(engine)
    app.state.engine = engine

    register_exception_handlers(app)

    app.add_middleware(RouteGateMiddleware, gate=RouteGate(token_service, cookie_manager))

    # CORS configuration
    # Debug allows any origin; otherwise only the configured frontends
    if settings.debug or settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if settings.debug else settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Register routers
    app.include_router(auth_router.router)
    app.include_router(user_router.router)
    app.include_router(product_router.router)
    app.include_router(hostel_router.router)

    @app.get("/")
    def root():
        """
        Health check endpoint.
        """
        return {
            "status": "running",
            "version": VERSION
        }

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "hostelmart.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
