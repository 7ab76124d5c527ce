"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .api import router
from .config import get_settings
from .core.config import get_config
from .core.context import AppContext, build_context
from .core.errors import ElectionBotError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True, # Ensure this config overrides any existing settings
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    context: Optional[AppContext] = getattr(app.state, "context", None)
    owns_context = context is None

    if owns_context:
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level.upper())
        logger.info("Starting Election Bot...")
        context = build_context(settings, get_config())
        app.state.context = context

    # Load the election data once; later turns reuse the cached snapshot
    snapshot = context.data_loader.load()
    logger.info(f"Election data ready ({len(snapshot.datasets)} datasets)")

    yield

    # Shutdown
    if owns_context:
        logger.info("Shutting down Election Bot...")
        await context.close()


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Create the FastAPI app, optionally around a prebuilt context."""
    app = FastAPI(
        title="Election Bot",
        description="Nonpartisan election-information chat service",
        version="0.1.0",
        lifespan=lifespan,
    )
    if context is not None:
        app.state.context = context

    @app.exception_handler(ElectionBotError)
    async def handle_election_bot_error(request, exc: ElectionBotError):
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "election_bot.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
