"""
POS Insights - Backend API
Revenue forecasting, financial health and reorder alerts for the store
"""
import logging
import time
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from pos_insights.core.config import settings
from pos_insights.core.database import check_database_connection, CONNECTION_TIMEOUT
from pos_insights.api import analytics, reorder
from pos_insights.services.analytics_engine import build_engine

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    debug=settings.API_DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

# Repositories connect lazily, so the engine can be built without a database
app.state.engine = build_engine(settings)

app.include_router(analytics.router)
app.include_router(reorder.router)

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "POS Insights API",
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
    }

@app.get("/health")
async def health():
    """Health check endpoint for monitoring - tests database connectivity"""
    start_time = time.time()

    database = check_database_connection()
    database["connection_timeout_s"] = CONNECTION_TIMEOUT

    total_latency_ms = round((time.time() - start_time) * 1000, 2)
    status = "healthy" if database["status"] == "connected" else "degraded"

    return {
        "status": status,
        "service": "pos-insights-api",
        "version": settings.API_VERSION,
        "database": database,
        "total_latency_ms": total_latency_ms,
    }
