from datetime import datetime, timedelta, timezone

import pytest

from deadline import JST, filter_due_soon, is_due_soon, parse_deadline
from errors import ParseError
from models import DISPLAY_FORMAT, KadaiRow


def _row(deadline_text: str, title: str = "レポート") -> KadaiRow:
    return KadaiRow(
        title=title,
        title_url=None,
        course="情報科学",
        course_url=None,
        deadline_text=deadline_text,
    )


@pytest.mark.parametrize("text", [
    "2026-10-20 23:59",
    "2026-01-01 00:00",
    "2024-02-29 12:30",
])
def test_parse_deadline_keeps_date_and_minute(text: str) -> None:
    deadline = parse_deadline(text)
    assert deadline.strftime(DISPLAY_FORMAT) == text
    assert deadline.utcoffset() == timedelta(hours=9)


def test_parse_deadline_is_japan_time() -> None:
    deadline = parse_deadline("2026-10-20 09:00")
    assert deadline == datetime(2026, 10, 20, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("text", [
    "2026/10/20 23:59",
    "2026-10-20",
    "締切なし",
    "2026-13-01 00:00",
])
def test_parse_deadline_rejects_malformed_text(text: str) -> None:
    with pytest.raises(ParseError):
        parse_deadline(text)


def test_is_due_soon_boundary_is_exclusive(now: datetime) -> None:
    threshold = timedelta(hours=48)
    assert is_due_soon(now + threshold - timedelta(minutes=1), now, threshold) is True
    assert is_due_soon(now + threshold, now, threshold) is False


def test_is_due_soon_keeps_overdue(now: datetime) -> None:
    assert is_due_soon(now - timedelta(days=3), now, timedelta(hours=48)) is True


@pytest.mark.parametrize("hours, expected", [
    (1, True),
    (23, True),
    (24, False),
    (30, False),
])
def test_filter_due_soon_respects_threshold(now: datetime, hours: int, expected: bool) -> None:
    text = (now + timedelta(hours=hours)).strftime(DISPLAY_FORMAT)
    kept = list(filter_due_soon([_row(text)], timedelta(hours=24), now))
    assert (len(kept) == 1) is expected


def test_filter_due_soon_keeps_row_order(now: datetime) -> None:
    rows = [
        _row("2026-10-20 10:00", "B"),
        _row("2026-10-19 18:00", "A"),
        _row("2026-10-30 10:00", "C"),
    ]
    kept = list(filter_due_soon(rows, timedelta(hours=48), now))
    assert [k.title for k in kept] == ["B", "A"]
    assert kept[0].deadline == datetime(2026, 10, 20, 10, 0, tzinfo=JST)


def test_filter_due_soon_stops_at_malformed_deadline(now: datetime) -> None:
    rows = iter([_row("2026-10-19 18:00"), _row("明日"), _row("2026-10-19 20:00")])
    kept = filter_due_soon(rows, timedelta(hours=48), now)

    assert next(kept).deadline == datetime(2026, 10, 19, 18, 0, tzinfo=JST)
    with pytest.raises(ParseError):
        next(kept)
