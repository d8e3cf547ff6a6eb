"""KennelTrack API application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()  # load .env before anything reads os.getenv()

from fastapi import FastAPI

from kennel import __version__
from kennel.api.routes import analysis_router, health_router
from kennel.services.database import create_tables

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the database tables at startup; the LLM client is created on first use."""
    await create_tables()
    logger.info("SQLite tables ready")
    app.state.llm_client = None

    yield

    logger.info("KennelTrack API stopped")


app = FastAPI(
    title="KennelTrack API",
    description=(
        "Business metrics for dog-breeding kennels (breeding, health, finance) "
        "with AI expert reports (Claude)."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(analysis_router)
