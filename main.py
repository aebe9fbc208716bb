"""
Helping Hands - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.core.config import settings
from app.core.db import init_db
from app.core.errors import ServiceError
from app.api import routes_events, routes_public, routes_users
from app.utils.responses import error_response, request_error_fields, service_error_response

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # The server starts even when the database is down; requests then fail with 503
    init_db()
    yield
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Helping Hands API",
    description="Community events: browse, create and join",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.ALLOW_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=settings.ALLOW_METHODS,
    allow_headers=settings.ALLOW_HEADERS,
)

# Include routers (public first so /events/debug/status wins over /events/{id})
app.include_router(routes_public.router, prefix="/api", tags=["public"])
app.include_router(routes_events.router, prefix="/api/events", tags=["events"])
app.include_router(routes_users.auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(routes_users.router, prefix="/api/users", tags=["users"])

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return service_error_response(exc)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = request_error_fields(exc.errors())
    return error_response(
        message=f"Invalid or missing fields: {', '.join(fields)}" if fields else "Invalid request",
        error_code="VALIDATION_ERROR",
        details={"fields": fields},
        status_code=400
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return error_response(
            message="Route not found",
            error_code="ROUTE_NOT_FOUND",
            details={"path": request.url.path, "method": request.method},
            status_code=404
        )
    return error_response(message=str(exc.detail), status_code=exc.status_code)

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error while processing %s %s", request.method, request.url.path)
    return error_response(
        message="Something went wrong" if settings.is_production else str(exc),
        error_code="INTERNAL_ERROR",
        status_code=500
    )

@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {"service": "helping-hands", "status": "ok"}

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
