# main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Ensure repo-root .env is loaded for the running server process.
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hackmate.config import build_sqlalchemy_db_url, settings
from hackmate.database import Base, engine
from hackmate import models  # noqa: F401
from hackmate.api.routes.health import router as health_router
from hackmate.gateway import Gateway, build_gateway
from hackmate.routers import browse, home, profile
from hackmate.services.session_registry import SessionRegistry


logger = logging.getLogger(__name__)


def create_app(gateway: Gateway | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.gateway = gateway or build_gateway(settings)
        app.state.sessions = SessionRegistry(app.state.gateway)
        logger.info("gateway.ready backend=%s", type(app.state.gateway).__name__)
        try:
            yield
        finally:
            await app.state.gateway.aclose()

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router)
    application.include_router(home.router)
    application.include_router(browse.router)
    application.include_router(profile.router)

    # For local/test sqlite usage, auto-create ORM tables.
    if settings.gateway_backend == "sql" and build_sqlalchemy_db_url(settings).startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    return application


app = create_app()
