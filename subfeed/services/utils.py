from datetime import datetime, timezone
from typing import Optional

def parse_published_at(value: str) -> Optional[datetime]:
    """Parses a YouTube timestamp (e.g. 2023-10-25T10:00:00Z) to an aware UTC datetime."""
    if not value:
        return None
    # Handle Z for UTC
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

def pick_thumbnail(thumbnails: dict, preferred=("medium", "default")) -> str:
    thumbnails = thumbnails or {}
    for size in preferred:
        url = thumbnails.get(size, {}).get("url")
        if url:
            return url
    return ""
