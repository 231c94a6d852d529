from typing import Any
from fastapi import APIRouter, Depends, Request, Response

from core.cache import compute_cache_metadata
from core.config import settings
from features.tides.models.tide_types import (
    ClosestStationResponse,
    ErrorResponse,
    NearbyStationsResponse,
    StationsResponse,
    TideStationPredictions
)
from features.tides.services.tide_service import TideOperation, TideService

router = APIRouter(tags=["Tides"])

ERROR_RESPONSES = {404: {"model": ErrorResponse, "description": "Station not found or unavailable"}}

def get_service(request: Request) -> TideService:
    """Dependency to get the TideService instance."""
    return request.app.state.tide_service

async def respond(service: TideService, operation: TideOperation, **params: Any) -> Response:
    """Run an operation and serialize it with cache headers.

    The ETag is computed over the exact bytes sent, so serialization happens
    here rather than in FastAPI's response handling.
    """
    result = await service.handle(operation, **params)
    body = result.model_dump_json(by_alias=True, exclude_none=True)
    metadata = compute_cache_metadata(body, settings.cache_hours)
    return Response(content=body, media_type="application/json", headers=metadata.headers())

@router.get(
    "/all",
    response_model=StationsResponse,
    summary="Get all tide stations",
    description="Returns every available prediction station. Does not include any predictions."
)
async def get_all_stations(
    service: TideService = Depends(get_service)
):
    """Get all tide stations."""
    return await respond(service, TideOperation.ALL)

@router.get(
    "/near/{lat},{lon}",
    response_model=NearbyStationsResponse,
    responses=ERROR_RESPONSES,
    summary="Find the closest stations to a position",
    description="Returns the 10 closest stations with predictions for yesterday, today and the next 2 days"
)
async def get_stations_near_position(
    lat: str,
    lon: str,
    service: TideService = Depends(get_service)
):
    """Get the nearest stations with predictions."""
    return await respond(service, TideOperation.NEAR, lat=lat, lon=lon)

@router.get(
    "/closest/{lat},{lon}",
    response_model=ClosestStationResponse,
    responses=ERROR_RESPONSES,
    summary="Find the closest station to a position",
    description="Returns the closest station with predictions for yesterday, today and the next 7 days"
)
async def get_station_closest_to_position(
    lat: str,
    lon: str,
    service: TideService = Depends(get_service)
):
    """Get the single nearest station with predictions."""
    return await respond(service, TideOperation.CLOSEST, lat=lat, lon=lon)

# Catch-all, must stay last
@router.get(
    "/{station_id}",
    response_model=TideStationPredictions,
    responses=ERROR_RESPONSES,
    summary="Get tide predictions for a station",
    description="Returns predictions for yesterday, today and the next 7 days"
)
async def get_station(
    station_id: str,
    service: TideService = Depends(get_service)
):
    """Get tide predictions for a specific station.

    Args:
        station_id: The NOAA station identifier
    """
    return await respond(service, TideOperation.STATION, station_id=station_id)
