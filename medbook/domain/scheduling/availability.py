"""Slot generation from weekly availability rules.

A doctor's week is described by rules of the form (day_of_week, start, end)
where day_of_week follows the 0 = Sunday convention used by the booking
calendar. For a given calendar date the matching rules are merged into
non-overlapping intervals and cut into fixed-width slots. A slot is
available when it is not already booked and, for today, has not started yet.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Protocol

from ...config import BOOKING_WINDOW_MONTHS, SLOT_MINUTES


class WeeklyRule(Protocol):
    day_of_week: int
    start_time: time
    end_time: time


@dataclass(frozen=True)
class Slot:
    time: time
    available: bool

    @property
    def label(self) -> str:
        return self.time.strftime("%H:%M")


def weekday_index(day: date) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday"""
    return (day.weekday() + 1) % 7


def merge_intervals(intervals: Iterable[tuple[time, time]]) -> list[tuple[time, time]]:
    """Merge overlapping or touching intervals; empty intervals are dropped"""
    merged: list[tuple[time, time]] = []
    for start, end in sorted(i for i in intervals if i[0] < i[1]):
        if merged and start <= merged[-1][1]:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


def intervals_for_day(rules: Iterable[WeeklyRule], day: date) -> list[tuple[time, time]]:
    """Normalized availability intervals for one calendar date"""
    index = weekday_index(day)
    return merge_intervals((r.start_time, r.end_time) for r in rules if r.day_of_week == index)


def enumerate_slot_times(start: time, end: time, slot_minutes: int = SLOT_MINUTES) -> list[time]:
    """Slot start times from start (inclusive) while strictly before end"""
    anchor = date.min
    current = datetime.combine(anchor, start)
    stop = datetime.combine(anchor, end)
    step = timedelta(minutes=slot_minutes)

    times = []
    while current < stop:
        times.append(current.time())
        current += step
    return times


def generate_slots(
    rules: Iterable[WeeklyRule],
    day: date,
    booked: Iterable[tuple[date, time]],
    now: datetime,
    slot_minutes: int = SLOT_MINUTES,
) -> list[Slot]:
    """
    Every candidate slot for ``day`` with its availability flag.

    Args:
        rules: the doctor's weekly availability rules
        day: calendar date to resolve
        booked: (date, time) pairs held by non-cancelled appointments
        now: current local moment; only used when ``day`` is today
        slot_minutes: slot width
    """
    taken = {(d, t.replace(second=0, microsecond=0)) for d, t in booked}
    is_today = day == now.date()

    slots = []
    for start, end in intervals_for_day(rules, day):
        for slot_time in enumerate_slot_times(start, end, slot_minutes):
            is_booked = (day, slot_time) in taken
            is_past = is_today and datetime.combine(day, slot_time) < now
            slots.append(Slot(time=slot_time, available=not is_booked and not is_past))
    return slots


def available_slots(
    rules: Iterable[WeeklyRule],
    day: date,
    booked: Iterable[tuple[date, time]],
    now: datetime,
    slot_minutes: int = SLOT_MINUTES,
) -> list[time]:
    """Only the bookable slot times for ``day``"""
    return [s.time for s in generate_slots(rules, day, booked, now, slot_minutes) if s.available]


def add_months(day: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the end of the month"""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def booking_window(today: date, months: int = BOOKING_WINDOW_MONTHS) -> tuple[date, date]:
    """Inclusive date range in which bookings are shown"""
    return today, add_months(today, months)


def bookable_dates(
    rules: Iterable[WeeklyRule],
    today: date,
    days: int = 14,
    months: int = BOOKING_WINDOW_MONTHS,
) -> list[date]:
    """Upcoming dates (today included) that have at least one availability rule.

    Dates past the end of the booking window are never returned.
    """
    working_days = {r.day_of_week for r in rules}
    _, last_day = booking_window(today, months)
    candidates = (today + timedelta(days=offset) for offset in range(days))
    return [d for d in candidates if d <= last_day and weekday_index(d) in working_days]
