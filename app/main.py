"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- Logging
- API routes
- Middleware (logging, CORS)
- 400 responses for malformed request bodies
- Schema creation on startup (development)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import endpoints
from app.api.schemas import HealthResponse
from app.core.logging_config import setup_logging
from app.core.setting import settings
from app.db.session import create_schema, engine
from app.middleware.logging import add_logging_middleware

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_SCHEMA:
        await create_schema(engine)
        logger.info("Database schema ready")
    logger.info(f"URL Shortener {settings.VERSION} serving short links at {settings.BASE_URL}")
    yield
    await engine.dispose()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400, like any other bad input."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


app = FastAPI(
    title="URL Shortener Service",
    description="Maps short alphanumeric codes to destination URLs and counts visits",
    version=settings.VERSION,
    docs_url="/docs",  # Swagger UI documentation
    redoc_url="/redoc",  # ReDoc documentation
    lifespan=lifespan,
)

app.add_exception_handler(RequestValidationError, request_validation_handler)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health endpoints defined before router to match before catch-all route
@app.get("/", tags=["Health"])
async def root():
    """Service information."""
    return {
        "message": "URL Shortener Service",
        "version": settings.VERSION,
        "docs": "/docs"
    }


@app.get("/healthz", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(ok=True, version=settings.VERSION)


app.include_router(endpoints.router, tags=["URL Shortener"])
