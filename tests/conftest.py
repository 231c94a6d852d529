"""
Shared fixtures for the tide predictions tests.
"""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, Mock
from zoneinfo import ZoneInfo

import pytest

from features.common.exceptions.tide_exceptions import FetchError
from features.tides.models.tide_types import PredictionType, Station, TidePrediction
from features.tides.services.noaa_client import NOAAClient
from features.tides.services.station_directory import StationDirectory


class StubTimeZones:
    """Time zone resolver that answers without loading boundary data."""

    def __init__(self, name: str = "America/New_York"):
        self.name = name
        self.calls = []

    def resolve(self, lat, lon, fallback_offset=None):
        self.calls.append((lat, lon))
        return self.name

    def zone_info(self, lat, lon, fallback_offset=None):
        return ZoneInfo(self.resolve(lat, lon, fallback_offset))


class FakeFetcher:
    """Prediction fetcher that records calls and concurrency."""

    def __init__(self, fail_ids=(), delays: Optional[Dict[str, float]] = None):
        self.fail_ids = set(fail_ids)
        self.delays = delays or {}
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def fetch_predictions(self, station: Station, days: int) -> List[TidePrediction]:
        self.calls.append((station.id, days))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(station.id, 0))
            if station.id in self.fail_ids:
                raise FetchError(f"Unable to get predictions for station {station.id}")
            time = datetime(2024, 3, 10, 7, 45, tzinfo=ZoneInfo("America/New_York"))
            return [
                TidePrediction(
                    type=PredictionType.HIGH,
                    height=4.1,
                    time=time,
                    unix_time=int(time.timestamp())
                )
            ]
        finally:
            self.active -= 1


def station_payload(station_id: str, lat: float, lon: float, **overrides) -> Dict:
    """An entry shaped like the CO-OPS `stationList`."""
    payload = {
        "stationId": station_id,
        "etidesStnName": f"STATION {station_id}",
        "commonName": f"COMMON {station_id}",
        "lat": lat,
        "lon": lon,
        "state": "NJ",
        "region": "Outer Coast",
        "timeZoneCorr": "-5",
        "stationType": "R",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload():
    return station_payload


@pytest.fixture
def stub_time_zones():
    return StubTimeZones()


@pytest.fixture
def fetcher_factory():
    return FakeFetcher


@pytest.fixture
def noaa_client():
    """NOAA client with the network call mocked out."""
    client = Mock(spec=NOAAClient)
    client.get_json = AsyncMock()
    return client


@pytest.fixture
def abc_stations():
    """Three stations: A at the origin, B one degree east, C far away."""
    return [
        station_payload("A", 0, 0),
        station_payload("B", 0, 1),
        station_payload("C", 10, 10),
    ]


@pytest.fixture
def load_directory(noaa_client):
    """Build a directory loaded with the given station payloads."""

    async def _load(payloads: List[Dict]) -> StationDirectory:
        noaa_client.get_json.return_value = {"stationList": payloads}
        directory = StationDirectory(noaa_client, stations_url="https://example.test/stations.json")
        assert await directory.refresh()
        return directory

    return _load
