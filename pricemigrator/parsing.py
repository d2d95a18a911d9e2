import re
from datetime import datetime
from typing import Optional

from .config import resolve_timezone
from .errors import MalformedSnapshotName

SNAPSHOT_DATE_FORMAT = "%Y-%m-%d_%H-%M-%S"

# strptime alone accepts unpadded fields such as ``2024-3-5_1-2-3``.
_SNAPSHOT_NAME_RE = re.compile(r"\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}")


def parse_snapshot_date(name: str, timezone: Optional[str] = None) -> datetime:
    """Return the observation instant encoded in a snapshot directory name.

    ``name`` must follow ``YYYY-MM-DD_hh-mm-ss`` exactly. The wall-clock time
    is interpreted in ``timezone`` (an IANA name) or, when it is empty, in
    the local timezone of the process. The result is always timezone-aware.
    """

    if not name or not _SNAPSHOT_NAME_RE.fullmatch(name):
        raise MalformedSnapshotName(name)
    try:
        naive = datetime.strptime(name, SNAPSHOT_DATE_FORMAT)
    except ValueError as exc:
        raise MalformedSnapshotName(name) from exc

    tz = resolve_timezone(timezone)
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)
