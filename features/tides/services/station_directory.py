import logging
from datetime import datetime, timezone
from typing import Dict, List, NamedTuple, Optional

from core.config import settings
from features.common.exceptions.tide_exceptions import FetchError, NotFound
from features.common.utils.geo import Point, distance_between
from features.tides.models.tide_types import Station
from features.tides.services.noaa_client import NOAAClient

logger = logging.getLogger(__name__)

class RankedStation(NamedTuple):
    """A station paired with its distance (km) from a query point."""
    station: Station
    distance: float

class StationDirectory:
    """In-memory directory of NOAA tide prediction stations.

    The directory is replaced wholesale on every refresh by swapping a single
    dict reference. Readers grab the current reference once, so a lookup never
    sees a half-built snapshot and no lock is needed.
    """

    def __init__(self, client: NOAAClient, stations_url: Optional[str] = None):
        self.client = client
        self.stations_url = stations_url or settings.coops_metadata_url
        self._snapshot: Dict[str, Station] = {}
        self.last_refreshed: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self._snapshot)

    async def refresh(self) -> bool:
        """Reload the full station list from NOAA.

        On failure the previous snapshot stays in place and the error is
        logged. Returns True when a new snapshot was installed.
        """
        try:
            stations = await self._fetch_stations()
        except FetchError as e:
            if self._snapshot:
                logger.error(f"❌ Station refresh failed, keeping {len(self._snapshot)} cached stations: {e.message}")
            else:
                logger.error(f"❌ Station refresh failed and no stations are cached: {e.message}")
            return False

        self._snapshot = stations
        self.last_refreshed = datetime.now(timezone.utc)
        logger.info(f"✅ Loaded {len(stations)} tide stations")
        return True

    async def _fetch_stations(self) -> Dict[str, Station]:
        data = await self.client.get_json(self.stations_url)

        station_list = data.get("stationList") if isinstance(data, dict) else None
        if not isinstance(station_list, list):
            raise FetchError("Station list missing from NOAA response")

        stations: Dict[str, Station] = {}
        skipped = 0
        for raw in station_list:
            try:
                station = Station.from_noaa(raw)
            except (KeyError, TypeError, ValueError) as e:
                skipped += 1
                logger.debug(f"Skipping station entry {raw!r}: {str(e)}")
                continue
            if not station.id:
                skipped += 1
                continue
            stations[station.id] = station

        if skipped:
            logger.warning(f"⚠️  Skipped {skipped} unusable station entries")
        if not stations:
            raise FetchError("NOAA returned no usable stations")

        return stations

    def get(self, station_id: str) -> Optional[Station]:
        return self._snapshot.get(station_id)

    def lookup_by_id(self, station_id: str) -> Station:
        """Get station by ID."""
        station = self._snapshot.get(station_id)
        if station is None:
            raise NotFound("Invalid station")
        return station

    def all(self) -> List[Station]:
        return list(self._snapshot.values())

    def nearest(self, point: Point, limit: int) -> List[RankedStation]:
        """Get the `limit` stations closest to a (lat, lon) point, nearest first.

        Stations at equal distance keep their directory order.
        """
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        snapshot = self._snapshot
        ranked = [
            RankedStation(station, distance_between(point, station.location))
            for station in snapshot.values()
        ]
        ranked.sort(key=lambda r: r.distance)
        return ranked[:limit]
