"""Pure date arithmetic for condition value synthesis.

Month and year shifts clamp to the last day of the target month, so
31 January + 1 month is 28 (or 29) February and 29 February + 1 year is
28 February. Every trigger, non-trigger and boundary computation goes
through the same helpers, which keeps comparisons between them consistent.
"""

import calendar
from datetime import date, datetime
from typing import Optional, Tuple, Union

from formqa_agent.data.form_structures import RelativeDateValue
from formqa_agent.exceptions import UnknownDirectionError

PAST = "in the past"
FUTURE = "in the future"

DateParts = Tuple[int, int, int]


def direction_multiplier(direction: str) -> int:
    if direction == PAST:
        return -1
    if direction == FUTURE:
        return 1
    raise UnknownDirectionError(f"Unknown relative date direction: {direction!r}")


def add_days(value: date, days: int) -> date:
    return date.fromordinal(value.toordinal() + days)


def shift_months(value: date, months: int) -> date:
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def shift_years(value: date, years: int) -> date:
    return shift_months(value, years * 12)


def shift(value: date, amount: int, unit: str) -> date:
    """Move `value` by `amount` of `unit` (days, months or years)."""
    if unit == "months":
        return shift_months(value, amount)
    if unit == "years":
        return shift_years(value, amount)
    return add_days(value, amount)


def resolve_relative_date(relative: RelativeDateValue, today: Optional[date] = None) -> date:
    """Resolve `relative` to the absolute boundary date, `today` +/- period units."""
    today = today or date.today()
    sign = direction_multiplier(relative.direction)
    return shift(today, sign * relative.period, relative.unit)


def nudge_relative_date(relative: RelativeDateValue, today: Optional[date] = None) -> date:
    """The boundary moved one `unit` back toward `today`.

    "At least 10 days in the past" is met by any date on or before the
    boundary; one unit nearer to today is the closest date that misses it.
    """
    boundary = resolve_relative_date(relative, today)
    return shift(boundary, -direction_multiplier(relative.direction), relative.unit)


def parse_date_string(raw: Union[str, date, None]) -> Optional[date]:
    """Parse an ISO date (a trailing time part is ignored); None when unparseable."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def to_day_month_year(value) -> Optional[DateParts]:
    """Split a date into (day, month, year) for a date-parts input."""
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return None
    return value.day, value.month, value.year


def from_day_month_year(parts: DateParts) -> date:
    day, month, year = parts
    return date(year, month, day)
