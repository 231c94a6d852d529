import base64
import hashlib
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Dict, Optional, Union

from pydantic import BaseModel

class CacheMetadata(BaseModel):
    """HTTP caching details for a serialized response body."""
    expires_at: datetime
    max_age_seconds: int
    fingerprint: str

    def headers(self) -> Dict[str, str]:
        """Render as HTTP response headers."""
        return {
            "Expires": format_datetime(self.expires_at.astimezone(timezone.utc), usegmt=True),
            "Cache-Control": f"public, max-age={self.max_age_seconds}",
            "ETag": self.fingerprint
        }

def body_fingerprint(body: Union[bytes, str]) -> str:
    """Strong entity tag for a response body.

    Format is `"<length in hex>-<first 27 chars of base64 sha1>"`, the same
    shape Node's `etag` module produces, so tags stay stable for clients that
    cached responses from the previous deployment.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    digest = base64.b64encode(hashlib.sha1(body).digest()).decode("ascii")[:27]
    return f'"{len(body):x}-{digest}"'

def compute_cache_metadata(
    body: Union[bytes, str],
    freshness_hours: int = 1,
    now: Optional[datetime] = None
) -> CacheMetadata:
    """Compute expiry, max-age and ETag for a response body."""
    now = now or datetime.now(timezone.utc)
    return CacheMetadata(
        expires_at=now + timedelta(hours=freshness_hours),
        max_age_seconds=freshness_hours * 3600,
        fingerprint=body_fingerprint(body)
    )
