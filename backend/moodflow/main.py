import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import api_router
from .core.config import EngineSettings, load_settings
from .services.engine import MoodboardEngine, build_engine

logger = logging.getLogger(__name__)


def configure_logging(settings: EngineSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[EngineSettings] = None,
    engine: Optional[MoodboardEngine] = None,
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifespan: configure logging, build the engine and
        the shared HTTP client on startup, close the client on shutdown.
        """
        configure_logging(settings)
        logger.info("Starting Moodflow application")
        app.state.engine = engine or build_engine(settings)
        app.state.http_client = httpx.AsyncClient()
        logger.info("Application startup complete")

        yield

        logger.info("Shutting down Moodflow application")
        await app.state.http_client.aclose()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Moodflow",
        description="Visual workflow graph engine for creative-production moodboards: typed node catalog, connection validation, topological execution and workflow templates.",
        lifespan=lifespan,
    )

    # Use regex to allow all Vercel domains and localhost
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_origin_regex=r"^https:\/\/.*\.vercel\.app$|^http:\/\/localhost:\d+$|^http:\/\/127\.0\.0\.1:\d+$",
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    app.include_router(api_router)
    return app


app = create_app()
