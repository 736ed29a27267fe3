"""Small formatting helpers shared by services and routers."""

from datetime import datetime

import pytz

ELLIPSIS = "…"


def truncate(text: str | None, length: int = 80) -> str:
    """Shorten text to at most length characters, marking cuts with an ellipsis.

    >>> truncate("abcdef", 4)
    'abc…'
    """
    if not text:
        return ""
    if len(text) <= length:
        return text
    return f"{text[:length - 1]}{ELLIPSIS}"


def format_bytes(size: int) -> str:
    """Human readable byte count (e.g. 1536 -> "1.5 KB")."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024 or unit == "GB":
            break
    return f"{value:.1f} {unit}"


def first_present(*values):
    """First value that is not None. Empty strings count as present."""
    return next((value for value in values if value is not None), None)


def parse_resource_id(resource_name: str) -> str:
    """Last path segment of a resource name ("fileSearchStores/a/documents/b" -> "b")."""
    return resource_name.rstrip("/").split("/")[-1] or resource_name


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(pytz.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
