"""
FastAPI Application Entrypoint.

Sets up CORS, error responses and the sales routers, and makes sure the
database schema exists before the first request is served.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.database import init_db, count_sales, SessionLocal
from app.api import health_router, sales_router
from app.services.csv_import import import_sales_csv

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: create the schema and report what is loaded."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    # Any failure here aborts startup; uvicorn exits non-zero
    try:
        init_db()
        db = SessionLocal()
        try:
            if settings.AUTO_IMPORT_ON_STARTUP and os.path.exists(settings.SALES_CSV_PATH):
                import_sales_csv(
                    db,
                    settings.SALES_CSV_PATH,
                    batch_size=settings.IMPORT_BATCH_SIZE,
                    skip_if_populated=True,
                )
            count = count_sales(db)
        finally:
            db.close()
    except Exception:
        logger.exception("Failed to initialize database")
        raise

    if count == 0:
        logger.info("Database is empty. Run `sales-import` to load data.")
    else:
        logger.info(f"Database contains {count} records")

    yield

    logger.info("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Search, filter, sort and summarise retail sales transactions.",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


# Every error body is {"error": <message>}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} {exc.detail} - {request.method} {request.url.path}")
    elif exc.status_code >= 400:
        logger.warning(f"HTTP {exc.status_code} {exc.detail} - {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    logger.warning(f"Validation error on {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include all routers under /api
app.include_router(health_router, prefix=settings.API_PREFIX)
app.include_router(sales_router, prefix=settings.API_PREFIX)


@app.get(settings.API_PREFIX)
async def root():
    """API root with service info."""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "endpoints": {
            "health": f"{settings.API_PREFIX}/health",
            "sales": f"{settings.API_PREFIX}/sales",
            "filters": f"{settings.API_PREFIX}/sales/filters",
            "summary": f"{settings.API_PREFIX}/sales/summary",
        },
    }


def run() -> None:
    """Serve the API with uvicorn (console entry point `sales-api`)."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
