import asyncio
import logging
import math
import re
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from core.config import settings
from features.common.exceptions.tide_exceptions import NotFound, ValidationError
from features.common.utils.names import normalize_name
from features.common.utils.time_zones import TimeZoneResolver
from features.tides.models.tide_types import (
    ClosestStationResponse,
    NearbyStationsResponse,
    Station,
    StationsResponse,
    TideStation,
    TideStationPredictions
)
from features.tides.services.prediction_fetcher import PredictionFetcher
from features.tides.services.station_directory import StationDirectory

logger = logging.getLogger(__name__)

Coordinate = Union[str, float, int]
DECIMAL_PATTERN = re.compile(r"-?([0-9]+\.?[0-9]*|\.[0-9]+)")

class TideOperation(str, Enum):
    """The four lookups the API exposes."""
    ALL = "all"
    NEAR = "near"
    CLOSEST = "closest"
    STATION = "station"

def _to_float(value: Coordinate) -> float:
    # float() alone would also take "1_0", " 5 " and "1e1"
    if isinstance(value, str) and not DECIMAL_PATTERN.fullmatch(value):
        raise ValueError(f"not a decimal number: {value!r}")
    return float(value)

def parse_coordinates(lat: Coordinate, lon: Coordinate) -> Tuple[float, float]:
    """Parse and range-check a latitude/longitude pair.

    Strings must be plain decimals such as ``-74.4771``.
    """
    try:
        lat_value = _to_float(lat)
        lon_value = _to_float(lon)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid coordinates: {lat},{lon}")

    if math.isnan(lat_value) or not -90 <= lat_value <= 90:
        raise ValidationError(f"Latitude must be between -90 and 90, got {lat}")
    if math.isnan(lon_value) or not -180 <= lon_value <= 180:
        raise ValidationError(f"Longitude must be between -180 and 180, got {lon}")

    return lat_value, lon_value

class TideService:
    """Resolves stations and assembles tide prediction responses."""

    def __init__(
        self,
        directory: StationDirectory,
        fetcher: PredictionFetcher,
        time_zones: TimeZoneResolver,
        near_limit: Optional[int] = None,
        near_days: Optional[int] = None,
        detail_days: Optional[int] = None,
        max_concurrent_fetches: Optional[int] = None
    ) -> None:
        self.directory = directory
        self.fetcher = fetcher
        self.time_zones = time_zones
        self.near_limit = near_limit or settings.near_station_limit
        self.near_days = near_days or settings.near_days
        self.detail_days = detail_days or settings.detail_days
        self.max_concurrent_fetches = max_concurrent_fetches or settings.max_concurrent_fetches

    async def handle(self, operation: TideOperation, **params: Any):
        """Run one of the API operations with its path parameters."""
        if operation == TideOperation.ALL:
            return await self.list_all()
        elif operation == TideOperation.NEAR:
            return await self.find_near(params["lat"], params["lon"])
        elif operation == TideOperation.CLOSEST:
            return await self.find_closest(params["lat"], params["lon"])
        elif operation == TideOperation.STATION:
            return await self.get_by_id(params["station_id"])
        raise ValueError(f"Unsupported operation {operation!r}")

    def format_station(self, station: Station, distance: Optional[float] = None) -> TideStation:
        return TideStation(
            id=station.id,
            name=normalize_name(station.raw_name),
            common_name=normalize_name(station.raw_common_name),
            lat=station.lat,
            lon=station.lon,
            state=station.state,
            region=station.region,
            time_zone=self.time_zones.resolve(station.lat, station.lon, station.time_zone_correction),
            distance=distance,
            type=station.station_type
        )

    async def get_station_predictions(
        self,
        station: Station,
        days: int,
        distance: Optional[float] = None
    ) -> TideStationPredictions:
        predictions = await self.fetcher.fetch_predictions(station, days)
        return TideStationPredictions(
            **self.format_station(station, distance).model_dump(),
            predictions=predictions
        )

    async def list_all(self) -> StationsResponse:
        """Get every station in the directory, without predictions."""
        return StationsResponse(
            stations=[self.format_station(station) for station in self.directory.all()]
        )

    async def find_near(self, lat: Coordinate, lon: Coordinate) -> NearbyStationsResponse:
        """Get the closest stations to a position with a short prediction window.

        Fetches run concurrently, capped by `max_concurrent_fetches`. A single
        failed fetch fails the whole request.
        """
        lat_value, lon_value = parse_coordinates(lat, lon)
        ranked = self.directory.nearest((lat_value, lon_value), self.near_limit)

        semaphore = asyncio.Semaphore(self.max_concurrent_fetches)

        async def fetch(station: Station, distance: float) -> TideStationPredictions:
            async with semaphore:
                return await self.get_station_predictions(station, self.near_days, distance)

        # gather keeps results in nearest-first input order
        stations: List[TideStationPredictions] = await asyncio.gather(
            *(fetch(r.station, r.distance) for r in ranked)
        )

        return NearbyStationsResponse(lat=lat_value, lon=lon_value, stations=stations)

    async def find_closest(self, lat: Coordinate, lon: Coordinate) -> ClosestStationResponse:
        """Get the single closest station with the full prediction window."""
        lat_value, lon_value = parse_coordinates(lat, lon)
        ranked = self.directory.nearest((lat_value, lon_value), 1)
        if not ranked:
            raise NotFound("No stations available")

        closest = ranked[0]
        station = await self.get_station_predictions(closest.station, self.detail_days, closest.distance)
        return ClosestStationResponse(lat=lat_value, lon=lon_value, station=station)

    async def get_by_id(self, station_id: str) -> TideStationPredictions:
        """Get a station by id with the full prediction window."""
        station_id = (station_id or "").strip()
        if not station_id:
            raise ValidationError("Station id is required")

        station = self.directory.lookup_by_id(station_id)
        return await self.get_station_predictions(station, self.detail_days)
