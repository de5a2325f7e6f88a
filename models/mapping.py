from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UrlMapping:
    """A persisted short code -> original URL association."""

    id: str
    original_url: str
    short_code: str
    click_count: int
    created_at: datetime
    # Derived from the configured base URL, never stored.
    short_url: str | None = None
