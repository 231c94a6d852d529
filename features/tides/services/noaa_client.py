import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.config import settings
from features.common.exceptions.tide_exceptions import FetchError

logger = logging.getLogger(__name__)

class NOAAClient:
    """Thin JSON client for the NOAA CO-OPS APIs sharing one HTTP session."""

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout or settings.request["timeout"]
        self._session: Optional[aiohttp.ClientSession] = None

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/json"}
            )
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a URL and decode the JSON body.

        Raises:
            FetchError: on transport errors, timeouts, non-2xx statuses or a
                body that is not valid JSON.
        """
        session = await self._init_session()
        try:
            async with session.get(url, params=params) as response:
                if not 200 <= response.status < 300:
                    logger.error(f"NOAA returned HTTP {response.status} for {url}")
                    raise FetchError(f"Upstream request failed with status {response.status}")

                # NOAA does not always label JSON bodies correctly
                return await response.json(content_type=None)

        except aiohttp.ClientError as e:
            logger.error(f"Error fetching {url}: {str(e)}")
            raise FetchError("Unable to reach NOAA") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Timed out fetching {url}")
            raise FetchError("Timed out waiting for NOAA") from e
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {str(e)}")
            raise FetchError("NOAA returned malformed data") from e
