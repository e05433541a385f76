"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.middleware.error_handler import ErrorHandlerMiddleware
from app.api.v1.routers import groups

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Grouping defaults: proximity={settings.grouping_proximity_threshold}m, "
                f"date_tolerance={settings.grouping_planting_date_tolerance}d, "
                f"area=[{settings.grouping_min_group_area}, {settings.grouping_max_group_area}]ha, "
                f"plots=[{settings.grouping_min_plots_per_group}, {settings.grouping_max_plots_per_group}]")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from app.infrastructure.records_api_client import get_records_client
    logger.info("Shutting down application...")
    client = get_records_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Group Formation API for Seasonal Rice Production

    This API partitions farmers' plots into groups that become the unit of
    supervision, production planning and material distribution for a season.

    ## Features

    - **Group Preview**: Propose groups for a cluster's season without persisting them
    - **Ungrouped Diagnostics**: Every plot left out gets a reason, the nearest
      same-variety group and follow-up suggestions
    - **Group Naming**: Structured names such as `CLS-W24-JAS-G01`
    - **Robust Error Handling**: Automatic retries with exponential backoff for
      farm-records API calls
    - **Rate Limiting**: Protects the API from abuse

    ## Formation Algorithm

    1. Filters plots with a confirmed variety that are not grouped yet
    2. Projects coordinates to a planar system (UTM)
    3. Splits plots by rice variety (never mixed within a group)
    4. Links plots transitively within the proximity threshold
    5. Sub-groups each spatial cluster by planting date
    6. Enforces plot count and area bounds, splitting oversized clusters largest plot first
    7. Computes centroid, union boundary, planting window and total area per group
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(groups.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
