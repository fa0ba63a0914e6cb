"""
Goal Getter Score Prediction API - FastAPI Application

Main entry point for the backend API.
This module configures the FastAPI app, middleware, and routes.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from goal_getter import __version__
from goal_getter.api.routes import predictions
from goal_getter.application.dtos.dtos import HealthResponseDTO, ErrorResponseDTO

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


from goal_getter.api.dependencies import get_settings
from goal_getter.utils.time_utils import get_current_time

settings = get_settings()


# Custom logging implementation to use Sao Paulo time
class SaoPauloTimeFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        ct = get_current_time()
        if datefmt:
            s = ct.strftime(datefmt)
        else:
            t = ct.strftime("%Y-%m-%d %H:%M:%S")
            s = "%s,%03d" % (t, record.msecs)
        return s


formatter = SaoPauloTimeFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler = logging.StreamHandler()
handler.setFormatter(formatter)
root_logger = logging.getLogger()
root_logger.setLevel(settings.log_level)
root_logger.handlers = [handler]
logger = logging.getLogger(__name__)


# Application metadata
APP_TITLE = "Goal Getter Score Prediction API"
APP_DESCRIPTION = """
**Football Scoreline Prediction API**

Predicts the most likely final scores of a fixture from historical results
and per-team goal statistics.

## Models

* **Dixon-Coles** - Poisson grid with low-score correction and market aggregates
* **Classic Poisson** - Independent Poisson goals
* **Markov chain** - Outcome percentages from recent result transitions
* **Markov-Poisson** - Poisson scorelines adjusted by Markov form
* **Enhanced Poisson** - Expected goals from recent form and head-to-head
* **Weighted frequency** - Ranking of literal historical scorelines

---
Educational purposes only - Not for actual betting
"""
APP_VERSION = __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {APP_TITLE} v{APP_VERSION}")
    logger.info(f"Results sources: {len(settings.results_urls)} file(s)")

    yield

    from goal_getter.infrastructure.cache.cache_service import get_cache_service
    logger.info("Shutting down...")
    get_cache_service().clear()


# Create FastAPI app
app = FastAPI(
    title=APP_TITLE,
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# Configure CORS
# Explicitly include loopback IPs which browsers sometimes use instead of 'localhost'
base_origins = [
    "http://localhost:5173",
    "http://localhost:8080",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8080",
]
all_origins = list(set([o for o in base_origins + settings.cors_origins if o]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=all_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=ErrorResponseDTO(
            error="internal_server_error",
            message="An unexpected error occurred",
            details={"path": str(request.url)},
        ).model_dump(),
    )


# Health check endpoint
@app.get(
    "/health",
    response_model=HealthResponseDTO,
    tags=["Health"],
    summary="Health check",
    description="Check if the API is running and healthy.",
)
async def health_check() -> HealthResponseDTO:
    """Health check endpoint."""
    return HealthResponseDTO(
        status="healthy",
        version=APP_VERSION,
        timestamp=get_current_time(),
    )


# Cache status endpoint
@app.get(
    "/cache/status",
    tags=["Health"],
    summary="Cache status",
)
async def cache_status():
    """Get cache statistics for debugging."""
    from goal_getter.infrastructure.cache.cache_service import get_cache_service
    return get_cache_service().stats


# Root endpoint
@app.get(
    "/",
    tags=["Root"],
    summary="API Information",
    description="Get basic API information and links.",
)
async def root():
    """Root endpoint with API info."""
    return {
        "name": APP_TITLE,
        "version": APP_VERSION,
        "documentation": "/docs",
        "health": "/health",
        "endpoints": {
            "dixon_coles": "/api/v1/predictions/dixon-coles",
            "dixon_coles_markets": "/api/v1/predictions/dixon-coles/markets",
            "poisson": "/api/v1/predictions/poisson",
            "markov": "/api/v1/predictions/markov",
            "markov_poisson": "/api/v1/predictions/markov-poisson",
            "enhanced_poisson": "/api/v1/predictions/enhanced-poisson",
            "weighted_frequency": "/api/v1/predictions/weighted-frequency",
            "historical_scores": "/api/v1/predictions/historical-scores",
            "analysis": "/api/v1/predictions/analysis",
        },
    }


# Include routers
app.include_router(predictions.router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "goal_getter.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
