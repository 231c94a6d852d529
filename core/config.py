from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, Any

class Settings(BaseSettings):
    """Application settings."""

    # Identifies this service to NOAA (sent as the `application` query param)
    application: str = ""

    # NOAA CO-OPS endpoints
    coops_metadata_url: str = "https://api.tidesandcurrents.noaa.gov/mdapi/prod/webapi/tidepredstations.json"
    coops_base_url: str = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
    coops_params: Dict[str, str] = {
        "product": "predictions",
        "datum": "MLLW",
        "time_zone": "lst_ldt",  # Local standard/daylight time at the station
        "units": "english",
        "interval": "hilo",
        "format": "json"
    }

    request: Dict[str, Any] = {
        "timeout": 30
    }

    # Aggregation settings
    near_station_limit: int = 10
    near_days: int = 2
    detail_days: int = 7
    max_concurrent_fetches: int = 10

    # Response freshness advertised via Expires / Cache-Control
    cache_hours: int = 1

    # Station directory refresh period
    station_refresh_hours: int = 24

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="tides_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
