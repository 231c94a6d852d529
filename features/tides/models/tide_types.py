from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

class StationType(str, Enum):
    """Whether NOAA predicts the station directly or by offset from a reference."""
    HARMONIC = "harmonic"
    SUBORDINATE = "subordinate"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "StationType":
        """Map the NOAA `stationType` code ("R" reference, "S" subordinate)."""
        if code and code.strip().upper() == "S":
            return cls.SUBORDINATE
        return cls.HARMONIC

class PredictionType(str, Enum):
    HIGH = "high"
    LOW = "low"

    @classmethod
    def from_code(cls, code: str) -> "PredictionType":
        """Map the NOAA hi/lo discriminator."""
        normalized = (code or "").strip().upper()
        if normalized == "H":
            return cls.HIGH
        if normalized == "L":
            return cls.LOW
        raise ValueError(f"Unknown prediction type {code!r}")

class Station(BaseModel):
    """Station record as held in the station directory."""
    id: str
    raw_name: str = ""
    raw_common_name: str = ""
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    state: Optional[str] = None
    region: Optional[str] = None
    station_type_code: Optional[str] = None
    time_zone_correction: Optional[str] = None  # Fixed UTC offset reported by NOAA

    model_config = ConfigDict(frozen=True)

    @property
    def location(self) -> Tuple[float, float]:
        return self.lat, self.lon

    @property
    def station_type(self) -> StationType:
        return StationType.from_code(self.station_type_code)

    @classmethod
    def from_noaa(cls, raw: Dict[str, Any]) -> "Station":
        """Build a station from an entry of the CO-OPS `stationList`."""
        return cls(
            id=str(raw["stationId"]).strip(),
            raw_name=raw.get("etidesStnName") or raw.get("stationName") or "",
            raw_common_name=raw.get("commonName") or "",
            lat=float(raw["lat"]),
            lon=float(raw["lon"]),
            state=raw.get("state"),
            region=raw.get("region"),
            station_type_code=raw.get("stationType"),
            time_zone_correction=(
                str(raw["timeZoneCorr"]) if raw.get("timeZoneCorr") is not None else None
            )
        )

class TidePrediction(BaseModel):
    """Individual high or low tide prediction"""
    type: PredictionType = Field(..., description="High or low tide")
    height: float = Field(..., description="Height of tide in feet above MLLW")
    time: datetime = Field(..., description="Local time of the tide, with UTC offset")
    unix_time: int = Field(..., alias="unixTime", description="Time of the tide in epoch seconds")

    model_config = ConfigDict(populate_by_name=True)

class TideStation(BaseModel):
    """Tide station details"""
    id: str = Field(..., description="Station identifier")
    name: str = Field(..., description="Station name")
    common_name: str = Field(..., alias="commonName", description="Common name of the station")
    lat: float = Field(..., description="Latitude")
    lon: float = Field(..., description="Longitude")
    state: Optional[str] = Field(None, description="State abbreviation")
    region: Optional[str] = Field(None, description="Region within the state")
    time_zone: str = Field(..., alias="timeZone", description="IANA time zone of the station")
    distance: Optional[float] = Field(None, description="Kilometres from the requested position")
    type: StationType = Field(..., description="Harmonic or subordinate station")

    model_config = ConfigDict(populate_by_name=True)

class TideStationPredictions(TideStation):
    """Tide station with predictions"""
    predictions: List[TidePrediction] = Field(..., description="High and low tides, oldest first")

class StationsResponse(BaseModel):
    stations: List[TideStation]

class NearbyStationsResponse(BaseModel):
    lat: float
    lon: float
    stations: List[TideStationPredictions]

class ClosestStationResponse(BaseModel):
    lat: float
    lon: float
    station: TideStationPredictions

class ErrorResponse(BaseModel):
    message: str
