from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from core.config import settings
from core.logging_config import setup_logging
from core.scheduler import Scheduler

from features.tides.routes.tide_routes import router as tide_router
from features.tides.services.noaa_client import NOAAClient
from features.tides.services.prediction_fetcher import PredictionFetcher
from features.tides.services.station_directory import StationDirectory
from features.tides.services.tide_service import TideService
from features.common.utils.time_zones import TimeZoneResolver
from features.common.exceptions.tide_exceptions import (
    ConfigurationError,
    MethodNotAllowed,
    NotFound,
    TideError
)

setup_logging()
logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "OPTIONS")

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "X-Requested-With, Content-Type, Accept",
    "Access-Control-Max-Age": "86400"
}

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        logger.info("🚀 Starting Tide Predictions API...")

        client = NOAAClient()
        app.state.noaa_client = client

        # Fails fast when the NOAA application name is not configured
        time_zones = TimeZoneResolver()
        fetcher = PredictionFetcher(client, time_zones, settings.application)

        directory = StationDirectory(client)
        app.state.station_directory = directory
        app.state.tide_service = TideService(directory, fetcher, time_zones)

        logger.info("📍 Loading station directory...")
        if not await directory.refresh():
            logger.warning("⚠️  Starting with an empty station directory, will retry on schedule")

        scheduler = Scheduler(directory)
        scheduler.start()
        app.state.scheduler = scheduler

        logger.info("✨ API startup complete - ready to serve requests")
        yield

    except ConfigurationError as e:
        logger.critical(f"❌ Invalid configuration: {str(e)}")
        raise
    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")
        raise
    finally:
        logger.info("🔄 Shutting down API...")
        if hasattr(app.state, "scheduler"):
            app.state.scheduler.shutdown()
        if hasattr(app.state, "noaa_client"):
            await app.state.noaa_client.close()
        logger.info("👋 API shutdown complete")

app = FastAPI(
    title="Tide Predictions API",
    description="Find the nearest NOAA tide prediction stations and get predictions for the next few days",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message},
        headers={"Access-Control-Allow-Origin": "*"}
    )

def is_known_route(request: Request) -> bool:
    """Check whether a GET route matches the request path."""
    scope = {**request.scope, "method": "GET"}
    return any(route.matches(scope)[0] == Match.FULL for route in request.app.router.routes)

@app.middleware("http")
async def cors_and_method_guard(request: Request, call_next):
    """Reject unsupported methods, answer preflights and add the CORS origin header."""
    if request.method not in ALLOWED_METHODS:
        error = MethodNotAllowed()
        response = error_response(error.status_code, error.message)
    elif request.method == "OPTIONS":
        if is_known_route(request):
            response = Response(status_code=200, media_type="application/json", headers=PREFLIGHT_HEADERS)
        else:
            error = NotFound()
            response = error_response(error.status_code, error.message)
    else:
        response = await call_next(request)

    response.headers["Access-Control-Allow-Origin"] = "*"
    return response

@app.exception_handler(TideError)
async def tide_error_handler(request: Request, exc: TideError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc.status_code, exc.message)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error for {request.method} {request.url.path}")
    return error_response(500, "Internal Server Error")

# Registered before the tide routes so the station-id catch-all can't shadow it
@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint"""
    directory = getattr(request.app.state, "station_directory", None)
    scheduler = getattr(request.app.state, "scheduler", None)
    last_refreshed = directory.last_refreshed if directory else None
    return {
        "status": "healthy" if directory and len(directory) else "degraded",
        "time": datetime.now(timezone.utc).isoformat(),
        "stations": len(directory) if directory else 0,
        "lastRefreshed": last_refreshed.isoformat() if last_refreshed else None,
        "nextRefresh": scheduler.get_next_run_time() if scheduler else None
    }

app.include_router(tide_router)

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 3000))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        workers=1
    )
