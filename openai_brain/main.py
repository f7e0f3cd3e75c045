"""FastAPI development server for exercising the brain locally.

Startup sequence: load .env → create the BrainService → serve routes.
Run with `openai-brain-dev` or `uvicorn openai_brain.main:app --port 1367`.
"""

import os
from contextlib import asynccontextmanager

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from openai_brain.api.routes import router
from openai_brain.brain.service import BrainService

load_dotenv()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("startup.begin")
    app.state.brain = BrainService()
    logger.info("startup.complete")
    yield
    logger.info("shutdown.complete")


app = FastAPI(
    title="OpenAI Brain Dev Server",
    description="Local harness for the OpenAI brain plugin",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(router)


def run() -> None:
    """Serve the dev app on BRAIN_DEV_HOST:BRAIN_DEV_PORT."""
    host = os.environ.get("BRAIN_DEV_HOST", "127.0.0.1")
    port = int(os.environ.get("BRAIN_DEV_PORT", "1367"))
    logger.info("dev_server.listen", host=host, port=port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
