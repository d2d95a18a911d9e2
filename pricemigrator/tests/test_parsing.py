from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from pricemigrator.errors import MalformedSnapshotName, MigrationConfigError
from pricemigrator.parsing import parse_snapshot_date


def test_parse_snapshot_date_in_configured_timezone():
    result = parse_snapshot_date("2024-03-15_14-30-00", "Europe/Warsaw")

    assert result == datetime(2024, 3, 15, 14, 30, 0, tzinfo=ZoneInfo("Europe/Warsaw"))
    assert result.astimezone(timezone.utc) == datetime(
        2024, 3, 15, 13, 30, 0, tzinfo=timezone.utc
    )


def test_parse_snapshot_date_defaults_to_local_time():
    result = parse_snapshot_date("2024-03-15_14-30-00")

    assert result.tzinfo is not None
    assert result.replace(tzinfo=None) == datetime(2024, 3, 15, 14, 30, 0)


@pytest.mark.parametrize(
    "name",
    [
        "garbage",
        "",
        "2024-13-01_00-00-00",
        "2024-02-30_10-00-00",
        "2024-03-15_24-00-00",
        "2024-3-15_14-30-00",
        "2024-03-15 14:30:00",
        "2024-03-15_14-30-00-extra",
    ],
)
def test_parse_snapshot_date_rejects_malformed_names(name):
    with pytest.raises(MalformedSnapshotName) as excinfo:
        parse_snapshot_date(name, "UTC")

    assert excinfo.value.name == name


def test_parse_snapshot_date_rejects_unknown_timezone():
    with pytest.raises(MigrationConfigError):
        parse_snapshot_date("2024-03-15_14-30-00", "Mars/Olympus_Mons")
