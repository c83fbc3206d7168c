# =============================================================================
# deep-filter -- Datetime Operators
# =============================================================================

"""
``$recent``, ``$upcoming``, ``$dayOfWeek``, ``$timeOfDay``, ``$age``,
``$isWeekday``, ``$isWeekend``, ``$isBefore``, ``$isAfter``.

Plain ``date`` values are treated as midnight. "Now" is taken in the
actual value's timezone (naive values compare against naive local time).
Day numbers run 0 = Sunday .. 6 = Saturday. Every evaluator returns
False for non-date values instead of raising.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from ..constants import DAYS_PER_MONTH, DAYS_PER_YEAR
from ..types import AgeQuery, RelativeTimeQuery, TimeOfDayQuery

_UNIT_DAYS = {"years": DAYS_PER_YEAR, "months": DAYS_PER_MONTH, "days": 1.0}


def as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def is_date(value: Any) -> bool:
    return isinstance(value, date)


def now_for(value: datetime) -> datetime:
    return datetime.now(value.tzinfo)


def day_of_week(value: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return (value.weekday() + 1) % 7


def age_in(value: datetime, unit: str) -> float:
    elapsed = now_for(value) - value
    return elapsed / timedelta(days=_UNIT_DAYS[unit])


def _safe(compare):
    # aware vs naive datetimes cannot be compared
    try:
        return compare()
    except TypeError:
        return False


# =============================================================================
# Factories
# =============================================================================


def _recent(payload, comparator):
    window = RelativeTimeQuery.from_payload(payload).as_timedelta()

    def evaluate(actual: Any) -> bool:
        if not is_date(actual):
            return False
        moment = as_datetime(actual)
        return _safe(lambda: timedelta(0) <= now_for(moment) - moment <= window)

    return evaluate


def _upcoming(payload, comparator):
    window = RelativeTimeQuery.from_payload(payload).as_timedelta()

    def evaluate(actual: Any) -> bool:
        if not is_date(actual):
            return False
        moment = as_datetime(actual)
        return _safe(lambda: timedelta(0) <= moment - now_for(moment) <= window)

    return evaluate


def _day_of_week(payload, comparator):
    days = frozenset(payload)
    return lambda actual: is_date(actual) and day_of_week(actual) in days


def _time_of_day(payload, comparator):
    query = TimeOfDayQuery.from_payload(payload)
    return lambda actual: is_date(actual) and query.contains(as_datetime(actual).hour)


def _age(payload, comparator):
    query = AgeQuery.from_payload(payload)

    def evaluate(actual: Any) -> bool:
        if not is_date(actual):
            return False
        moment = as_datetime(actual)
        try:
            age = age_in(moment, query.unit)
        except TypeError:
            return False
        if query.min is not None and age < query.min:
            return False
        if query.max is not None and age > query.max:
            return False
        return True

    return evaluate


def _is_weekday(payload, comparator):
    expected = bool(payload)
    return lambda actual: is_date(actual) and (1 <= day_of_week(actual) <= 5) is expected


def _is_weekend(payload, comparator):
    expected = bool(payload)
    return lambda actual: is_date(actual) and (day_of_week(actual) in (0, 6)) is expected


def _is_before(payload, comparator):
    bound = as_datetime(payload)
    return lambda actual: is_date(actual) and _safe(lambda: as_datetime(actual) < bound)


def _is_after(payload, comparator):
    bound = as_datetime(payload)
    return lambda actual: is_date(actual) and _safe(lambda: as_datetime(actual) > bound)


OPERATORS = {
    "$recent": _recent,
    "$upcoming": _upcoming,
    "$dayOfWeek": _day_of_week,
    "$timeOfDay": _time_of_day,
    "$age": _age,
    "$isWeekday": _is_weekday,
    "$isWeekend": _is_weekend,
    "$isBefore": _is_before,
    "$isAfter": _is_after,
}
