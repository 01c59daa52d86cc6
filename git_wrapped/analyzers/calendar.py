"""Flatten the nested week/day contribution calendar into one day sequence."""
import logging

from git_wrapped.models import ActivityDay, ContributionCalendar, InvalidActivityDocument

_log = logging.getLogger(__name__)


def flatten_calendar(calendar: ContributionCalendar) -> list[ActivityDay]:
    """Return every calendar day in input order.

    Weeks are trusted to arrive chronologically and are not re-sorted.
    A date seen twice makes the calendar unusable for streaks, so it raises.
    """
    days: list[ActivityDay] = []
    seen: set = set()
    for week in calendar.weeks:
        for day in week.contribution_days:
            if day.date in seen:
                raise InvalidActivityDocument(f"Duplicate calendar date {day.date.isoformat()}")
            seen.add(day.date)
            days.append(ActivityDay(date=day.date, count=day.contribution_count, weekday=day.weekday))

    _log.debug("Flattened %d week(s) into %d day(s)", len(calendar.weeks), len(days))
    return days
