import logging
from typing import Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timezonefinder import TimezoneFinder

logger = logging.getLogger(__name__)

DEFAULT_TIME_ZONE = "UTC"

def offset_time_zone(offset: Optional[str]) -> Optional[str]:
    """Map a whole-hour UTC offset such as "-5" to its Etc/GMT zone name.

    Etc/GMT names use inverted signs: UTC-5 is "Etc/GMT+5".
    """
    if offset is None:
        return None
    try:
        hours = float(offset)
    except (TypeError, ValueError):
        return None
    if not hours.is_integer() or abs(hours) > 14:
        return None
    if hours == 0:
        return "Etc/GMT"
    return f"Etc/GMT{-int(hours):+d}"

class TimeZoneResolver:
    """Resolves IANA time zone names from coordinates.

    Results are cached per coordinate so every caller asking about the same
    station gets the same answer without repeating the polygon lookup.
    """

    def __init__(self, finder: Optional[TimezoneFinder] = None):
        self._finder = finder
        self._cache: Dict[Tuple[float, float], str] = {}

    def _get_finder(self) -> TimezoneFinder:
        # Loads the boundary data on first use
        if self._finder is None:
            self._finder = TimezoneFinder()
        return self._finder

    def resolve(self, lat: float, lon: float, fallback_offset: Optional[str] = None) -> str:
        """Get the time zone name for a coordinate.

        Falls back to the fixed offset (if given) and then to UTC when the
        coordinate is outside every zone polygon.
        """
        key = (lat, lon)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        name = self._get_finder().timezone_at(lat=lat, lng=lon)
        if name is None:
            name = offset_time_zone(fallback_offset) or DEFAULT_TIME_ZONE
            logger.debug(f"No zone polygon at ({lat}, {lon}), using {name}")

        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown time zone {name} at ({lat}, {lon}), using {DEFAULT_TIME_ZONE}")
            name = DEFAULT_TIME_ZONE

        self._cache[key] = name
        return name

    def zone_info(self, lat: float, lon: float, fallback_offset: Optional[str] = None) -> ZoneInfo:
        return ZoneInfo(self.resolve(lat, lon, fallback_offset))
