import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from core.config import settings
from features.common.exceptions.tide_exceptions import ConfigurationError, FetchError
from features.common.utils.time_zones import TimeZoneResolver
from features.tides.models.tide_types import PredictionType, Station, TidePrediction
from features.tides.services.noaa_client import NOAAClient

logger = logging.getLogger(__name__)

NOAA_TIME_FORMAT = "%Y-%m-%d %H:%M"

class PredictionFetcher:
    """Fetches high/low tide predictions for a single station from CO-OPS."""

    def __init__(
        self,
        client: NOAAClient,
        time_zones: TimeZoneResolver,
        application: str,
        data_url: Optional[str] = None
    ):
        if not application:
            raise ConfigurationError(
                "Set TIDES_APPLICATION to the application name NOAA should see"
            )
        self.client = client
        self.time_zones = time_zones
        self.application = application
        self.data_url = data_url or settings.coops_base_url

    def station_zone(self, station: Station) -> ZoneInfo:
        return self.time_zones.zone_info(station.lat, station.lon, station.time_zone_correction)

    def build_params(self, station: Station, days: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Query parameters for a prediction window.

        The window opens at the start of yesterday (station local time) so late
        tides from the previous evening are included, and runs two extra days
        past `days` to leave room at the edges.
        """
        zone = self.station_zone(station)
        local_now = (now or datetime.now(zone)).astimezone(zone)
        begin_date = local_now - timedelta(days=1)

        return {
            **settings.coops_params,
            "station": station.id,
            "begin_date": begin_date.strftime("%Y%m%d"),
            "range": 24 * (days + 2),
            "application": self.application
        }

    async def fetch_predictions(
        self,
        station: Station,
        days: int,
        now: Optional[datetime] = None
    ) -> List[TidePrediction]:
        """Get predictions for a station covering yesterday through `days` ahead."""
        if not isinstance(days, int) or days < 1:
            raise ValueError(f"days must be a positive integer, got {days!r}")

        params = self.build_params(station, days, now)
        data = await self.client.get_json(self.data_url, params=params)

        if not isinstance(data, dict):
            raise FetchError(f"Unexpected prediction payload for station {station.id}")

        if "error" in data:
            error = data["error"] if isinstance(data["error"], dict) else {}
            message = error.get("message", "Unknown error from NOAA API")
            logger.error(f"NOAA error for station {station.id}: {message}")
            raise FetchError(f"Unable to get predictions for station {station.id}")

        raw_predictions = data.get("predictions")
        if not isinstance(raw_predictions, list):
            raise FetchError(f"Predictions missing for station {station.id}")

        zone = self.station_zone(station)
        try:
            return [self._parse_prediction(raw, zone) for raw in raw_predictions]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error parsing predictions for station {station.id}: {str(e)}")
            raise FetchError(f"Malformed predictions for station {station.id}") from e

    @staticmethod
    def _parse_prediction(raw: Dict[str, Any], zone: ZoneInfo) -> TidePrediction:
        # NOAA local times carry no offset; attach the station's zone
        local_time = datetime.strptime(raw["t"], NOAA_TIME_FORMAT).replace(tzinfo=zone)
        return TidePrediction(
            type=PredictionType.from_code(raw["type"]),
            height=float(raw["v"]),
            time=local_time,
            unix_time=int(local_time.timestamp())
        )
