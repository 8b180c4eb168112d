"""FastAPI application for the Editorial Checker service."""

import contextlib
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables from .env file
load_dotenv()

from ..domain.errors import ConfigurationError
from ..infrastructure.dependencies import get_service_container
from .endpoints import fact_check, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application."""
    yield  # Application runs here

    # Shutdown: Cleanup providers
    await get_service_container().shutdown()


# Create FastAPI application
app = FastAPI(
    title="Editorial Checker API",
    description="Pre-publication fact-accuracy checks with retrieval-augmented verification",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Missing credentials make the checker unavailable rather than failing the article."""
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# Include routers
app.include_router(health.router)
app.include_router(fact_check.router)
