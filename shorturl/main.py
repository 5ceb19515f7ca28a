"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- Logging
- API routes (mounted under /api)
- Middleware (request logging, CORS)
- Rate limiting

Run with: uvicorn shorturl.main:app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shorturl.api import endpoints
from shorturl.core.rate_limit import limiter
from shorturl.core.setting import settings
from shorturl.db.session import create_tables
from shorturl.middleware.logging import add_logging_middleware

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="Short URL API",
    description="URL shortener with per-redirect analytics and click statistics",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint for health checks."""
    return {
        "message": "Short URL API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "environment": settings.ENV_SETTING.value}


app.include_router(endpoints.router, prefix="/api", tags=["URL Shortener"])


@app.on_event("startup")
async def startup_event():
    """Create tables on startup when migrations are not used."""
    if settings.AUTO_CREATE_TABLES:
        await create_tables()
