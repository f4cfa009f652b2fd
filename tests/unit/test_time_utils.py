from datetime import datetime, timezone

from codebak.utils import time_utils


def test_archive_file_name() -> None:
    moment = datetime(2024, 1, 15, 10, 30, 5)
    assert time_utils.archive_file_name(moment) == "20240115-103005.zip"


def test_version_from_file() -> None:
    assert time_utils.version_from_file("20240115-103005.zip") == "20240115-103005"
    assert time_utils.version_from_file("20240115-103005") == "20240115-103005"


def test_parse_version() -> None:
    assert time_utils.parse_version("20240115-103005.zip") == datetime(2024, 1, 15, 10, 30, 5)
    assert time_utils.parse_version("latest") is None


def test_iso_round_trip() -> None:
    moment = datetime(2024, 1, 15, 10, 30, 5, 123456, tzinfo=timezone.utc)
    assert time_utils.from_iso(time_utils.to_iso(moment)) == moment


def test_from_iso_accepts_zulu_and_nanoseconds() -> None:
    parsed = time_utils.from_iso("2024-01-15T10:30:05.123456789Z")
    assert parsed == datetime(2024, 1, 15, 10, 30, 5, 123456, tzinfo=timezone.utc)


def test_now_is_timezone_aware() -> None:
    assert time_utils.now().tzinfo is not None
