"""Recurrence rules: parse ``every ...`` text and compute the next due date.

Plain intervals (``every 2 weeks``) are calendar arithmetic via
``relativedelta``; rules pinned to weekdays go through ``rrule``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, WEEKLY, rrule

RULE_TEXT_PATTERN = r"[a-zA-Z0-9, !]+"

_UNIT_FIELDS: dict[str, str] = {
    "day": "days",
    "week": "weeks",
    "month": "months",
    "year": "years",
}

_WEEKDAYS: dict[str, int] = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tue": 1, "tues": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thu": 3, "thurs": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}

_WORKING_DAYS: tuple[int, ...] = (0, 1, 2, 3, 4)

_INTERVAL_RE = re.compile(
    r"^every\s+(?:(?P<interval>\d{1,4})\s+)?(?P<unit>day|week|month|year)s?"
    r"(?:\s+on\s+(?P<on>.+))?$"
)
_MONTH_DAY_RE = re.compile(
    r"^(?:the\s+)?(?:(?P<day>\d{1,2})(?:st|nd|rd|th)?|(?P<last>last))(?:\s+day)?$"
)


def _to_datetime(d: date) -> datetime:
    return datetime.combine(d, time())


def _parse_weekdays(text: str) -> tuple[int, ...] | None:
    """Parse ``monday, friday`` / ``tue and thu`` into sorted weekday numbers."""
    names = [n for n in re.split(r"\s*,\s*|\s+and\s+|\s+", text.strip()) if n]
    if not names:
        return None
    days: set[int] = set()
    for name in names:
        day = _WEEKDAYS.get(name)
        if day is None:
            return None
        days.add(day)
    return tuple(sorted(days))


def _parse_month_day(text: str) -> int | None:
    m = _MONTH_DAY_RE.match(text.strip())
    if not m:
        return None
    if m.group("last"):
        # relativedelta(day=31) clamps to the last day of any month.
        return 31
    day = int(m.group("day"))
    if not 1 <= day <= 31:
        return None
    return day


@dataclass(frozen=True)
class Recurrence:
    """A parsed recurrence rule.

    ``text`` keeps the rule exactly as written so a task line serializes
    back to the same bytes it was parsed from.
    """

    text: str
    unit: str
    interval: int = 1
    by_weekday: tuple[int, ...] = ()
    month_day: int | None = None

    @classmethod
    def from_text(cls, text: str) -> Recurrence | None:
        """Parse *text* into a rule, or return ``None`` if it is not one."""
        normalized = " ".join(text.lower().replace("!", " ").split())
        if not normalized.startswith("every "):
            return None

        if normalized == "every weekday":
            return cls(text=text, unit="day", by_weekday=_WORKING_DAYS)

        # "every monday", "every tuesday and friday"
        bare_days = _parse_weekdays(normalized[len("every "):])
        if bare_days is not None:
            return cls(text=text, unit="week", by_weekday=bare_days)

        m = _INTERVAL_RE.match(normalized)
        if not m:
            return None

        interval = int(m.group("interval") or 1)
        if interval < 1:
            return None
        unit = m.group("unit")
        on = m.group("on")
        if on is None:
            return cls(text=text, unit=unit, interval=interval)

        if unit == "week":
            days = _parse_weekdays(on)
            if days is None:
                return None
            return cls(text=text, unit=unit, interval=interval, by_weekday=days)

        if unit == "month":
            month_day = _parse_month_day(on)
            if month_day is None:
                return None
            return cls(text=text, unit=unit, interval=interval, month_day=month_day)

        return None

    def to_text(self) -> str:
        return self.text

    def next_occurrence(self, reference: date) -> date:
        """Return the first date strictly after *reference* matching this rule.

        Raises ``ValueError`` or ``OverflowError`` when that date would fall
        past ``date.max``.
        """
        if self.by_weekday:
            freq = WEEKLY if self.unit == "week" else DAILY
            start = _to_datetime(reference)
            rule = rrule(
                freq,
                interval=self.interval,
                byweekday=self.by_weekday,
                dtstart=start,
            )
            following = rule.after(start)
            if following is None:
                raise ValueError(f"Recurrence {self.text!r} has no occurrence after {reference}")
            return following.date()

        if self.month_day is not None:
            candidate = reference + relativedelta(day=self.month_day)
            if candidate <= reference:
                candidate = reference + relativedelta(months=self.interval, day=self.month_day)
            return candidate

        return reference + relativedelta(**{_UNIT_FIELDS[self.unit]: self.interval})


def next_due_date(rule: Recurrence, reference: date) -> date:
    """Next due date for *rule* counted from *reference* (the task's due date)."""
    return rule.next_occurrence(reference)
