"""Service for building month grids with per-day occupancy classification."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date

from dateutil.relativedelta import relativedelta

from lodging.domain.dates import as_day
from lodging.domain.models import DayCell, MonthGrid, Reservation
from lodging.services.occupancy import occupants_on_day

_WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

_FIRST_WEEKDAY = {"monday": calendar.MONDAY, "sunday": calendar.SUNDAY}


def first_weekday(week_start: str) -> int:
    try:
        return _FIRST_WEEKDAY[week_start.lower()]
    except KeyError:
        raise ValueError(f"Unsupported week start: {week_start!r}") from None


def month_grid(
    month_date: date,
    reservations: Iterable[Reservation],
    today: date,
    week_start: str = "sunday",
) -> MonthGrid:
    """Classify every cell of the month containing *month_date*.

    The grid always spans whole weeks, from the start of the week holding
    the 1st through the end of the week holding the last day, so it has
    between 28 and 42 cells. Days from adjacent months are included with
    ``in_month=False``.
    """
    month_date, today = as_day(month_date), as_day(today)
    reservations = list(reservations)
    firstweekday = first_weekday(week_start)

    weeks = calendar.Calendar(firstweekday).monthdatescalendar(
        month_date.year, month_date.month
    )
    cells = [
        DayCell(
            day=day,
            in_month=day.month == month_date.month,
            is_today=day == today,
            reservations=occupants_on_day(day, reservations),
        )
        for week in weeks
        for day in week
    ]

    return MonthGrid(
        year=month_date.year,
        month=month_date.month,
        title=f"{calendar.month_name[month_date.month]} {month_date.year}",
        weekday_labels=_WEEKDAY_LABELS[firstweekday:] + _WEEKDAY_LABELS[:firstweekday],
        cells=cells,
    )


def shift_month(anchor: date, months: int) -> date:
    """Move *anchor* by whole months, clamping the day to the target month."""
    return as_day(anchor) + relativedelta(months=months)


def calendar_view(
    anchor: date,
    reservations: Iterable[Reservation],
    today: date,
    months: int = 4,
    week_start: str = "sunday",
) -> list[MonthGrid]:
    """Return *months* consecutive grids starting with the anchor's month."""
    if months < 1:
        raise ValueError("months must be at least 1")
    reservations = list(reservations)
    return [
        month_grid(shift_month(anchor, offset), reservations, today, week_start)
        for offset in range(months)
    ]
