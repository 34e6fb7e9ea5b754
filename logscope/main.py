"""
FastAPI application entry point.
LogScope - log normalization and tiered anomaly classification
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from logscope import __version__
from logscope.config import get_settings
from logscope.api.dependencies import get_classifier
from logscope.api.routes import router


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    yield
    # Shutdown: close remote tier clients if the classifier was ever built
    if get_classifier.cache_info().currsize:
        await get_classifier().aclose()


app = FastAPI(
    title=settings.app_name,
    description="Normalizes heterogeneous log files and scores each entry for security risk "
                "(OpenAI -> Hugging Face zero-shot -> rule engine).",
    version=__version__,
    lifespan=lifespan,
)

# Include API routes
app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "logscope.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
