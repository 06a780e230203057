"""Range expression parser for history commands.

Pure and deterministic given ``now``.  Accepted forms:

* ``today`` — local calendar day of ``now``: ``[00:00, 00:00 + 1 day)``.
* ``week``  — rolling ``[now - 7 days, now]``.
* ``month`` — rolling ``[now - 1 calendar month, now]``; the day of month
  is clamped when the previous month is shorter (Mar 31 → Feb 28/29).
* ``YYYY-MM-DD,YYYY-MM-DD`` — both days inclusive, i.e. from the start
  of the first day up to the start of the day after the second.

All bounds carry ``now``'s ``tzinfo``.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta

from surepet_cli.core.models import RangeSpec
from surepet_cli.exceptions import RangeParseError

ACCEPTED_FORMS: str = "'today', 'week', 'month', or 'YYYY-MM-DD,YYYY-MM-DD'"

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_range(expr: str, now: datetime) -> RangeSpec:
    """Convert *expr* into a :class:`RangeSpec` relative to *now*.

    Raises
    ------
    RangeParseError
        For unrecognised keywords, malformed dates, or a start date that
        falls after the end date.
    """
    keyword = expr.strip().lower()

    if keyword == "today":
        start = _start_of_day(now.date(), now)
        return RangeSpec(start=start, end=start + timedelta(days=1))
    if keyword == "week":
        return RangeSpec(start=now - timedelta(days=7), end=now)
    if keyword == "month":
        return RangeSpec(start=_one_month_before(now), end=now)
    if "," in keyword:
        return _parse_explicit(keyword, now)

    raise RangeParseError(
        f"Invalid date range '{expr}'.",
        hint=f"Use {ACCEPTED_FORMS}.",
    )


def _parse_explicit(expr: str, now: datetime) -> RangeSpec:
    parts = [part.strip() for part in expr.split(",")]
    if len(parts) != 2:
        raise RangeParseError(
            f"Custom date range '{expr}' must contain exactly two dates.",
            hint="Use 'YYYY-MM-DD,YYYY-MM-DD'.",
        )

    first = _parse_day(parts[0], "start")
    last = _parse_day(parts[1], "end")
    if first > last:
        raise RangeParseError(
            f"Start date {first.isoformat()} is after end date {last.isoformat()}.",
            hint="Put the earlier date first.",
        )

    return RangeSpec(
        start=_start_of_day(first, now),
        end=_start_of_day(last + timedelta(days=1), now),
    )


def _parse_day(text: str, which: str) -> date:
    if not _ISO_DAY.match(text):
        raise RangeParseError(
            f"Invalid {which} date '{text}'.",
            hint="Use YYYY-MM-DD format.",
        )
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise RangeParseError(
            f"Invalid {which} date '{text}': {exc}.",
            hint="Use YYYY-MM-DD format.",
        ) from exc


def _start_of_day(day: date, now: datetime) -> datetime:
    return datetime.combine(day, time.min, tzinfo=now.tzinfo)


def _one_month_before(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
