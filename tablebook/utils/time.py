from datetime import date, datetime, time, timezone

def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def to_minute(t: time) -> time:
    """Drops seconds, microseconds and tzinfo so equal slots compare equal."""
    return t.replace(second=0, microsecond=0, tzinfo=None)

def api_date(d: date) -> str:
    return d.isoformat()

def api_time(t: time) -> str:
    return t.strftime("%H:%M")

def api_iso_z(dt: datetime | None) -> str | None:
    """Formats a datetime into an ISO 8601 string ending in 'Z' for API responses."""
    if dt is None:
        return None
    return to_utc(dt).astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
