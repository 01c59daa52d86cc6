"""Streaks and temporal distributions over a flattened activity calendar."""
import logging

from git_wrapped.models import ActivityDay, ActivitySummary, HourlyEstimate, StreakResult
from git_wrapped.utils.patterns import WEEKDAY_NAMES, find_peak, one_decimal

_log = logging.getLogger(__name__)

# Per-mille share of a contribution total assigned to each hour of the day.
# The activity feed carries no timestamps, so this spread is an assumption:
# peak at 14:00, tapering through the working day, near-idle overnight.
HOURLY_WEIGHTS = (
    10, 5, 5, 5, 5, 5, 10, 15,          # 00-07
    25, 40, 50, 60, 80, 100, 150, 100,  # 08-15
    80, 60, 50, 40, 35, 30, 25, 15,     # 16-23
)

WEEKS_PER_YEAR = 52


def compute_streaks(days: list[ActivityDay]) -> StreakResult:
    """Longest streak (with its dates) and the streak running at the end of the sequence."""
    longest = 0
    longest_start = longest_end = None
    run = 0
    run_start = None
    for day in days:
        if day.count > 0:
            if run == 0:
                run_start = day.date
            run += 1
            if run > longest:
                longest, longest_start, longest_end = run, run_start, day.date
        else:
            run = 0
            run_start = None

    current = 0
    for day in reversed(days):
        if day.count == 0:
            break
        current += 1

    # the trailing run must count towards the longest
    if current > longest:
        longest = current
        longest_start = days[-current].date
        longest_end = days[-1].date

    return StreakResult(longest=longest, longest_start=longest_start, longest_end=longest_end, current=current)


def compute_weekday_distribution(days: list[ActivityDay]) -> dict[int, int]:
    """Summed counts per weekday, 0 (Sunday) to 6, all keys present."""
    distribution = {weekday: 0 for weekday in range(7)}
    for day in days:
        distribution[day.weekday] += day.count
    return distribution


def compute_monthly_distribution(days: list[ActivityDay]) -> dict[str, int]:
    """Summed counts per ``YYYY-MM`` month, in ascending month order."""
    distribution: dict[str, int] = {}
    for day in days:
        month = day.date.strftime("%Y-%m")
        distribution[month] = distribution.get(month, 0) + day.count
    return dict(sorted(distribution.items()))


def find_busiest_day(distribution: dict[int, int]) -> tuple[int, int] | None:
    return find_peak(distribution, order=range(7))


def find_peak_month(distribution: dict[str, int]) -> tuple[str, int] | None:
    return find_peak(distribution, order=sorted(distribution))


def estimate_hourly_distribution(total: int) -> HourlyEstimate:
    """Spread ``total`` over 24 hours using HOURLY_WEIGHTS.

    This is an estimate, flagged ``estimated=True``; it says nothing about
    when the contributions actually happened.
    """
    distribution = {hour: round(total * weight / 1000, 2) for hour, weight in enumerate(HOURLY_WEIGHTS)}
    peak = find_peak(distribution, order=range(24)) if total > 0 else None
    return HourlyEstimate(peak_hour=peak[0] if peak else None, distribution=distribution)


def average_per_active_day(total: int, active_days: int) -> str:
    return one_decimal(total, active_days)


def summarize_activity(days: list[ActivityDay], total_contributions: int | None = None) -> ActivitySummary:
    """Collect streaks, distributions and density figures for one calendar."""
    counted = sum(day.count for day in days)
    total = counted if total_contributions is None else total_contributions

    streaks = compute_streaks(days)
    weekday = compute_weekday_distribution(days)
    monthly = compute_monthly_distribution(days)
    busiest = find_busiest_day(weekday) if counted else None
    peak_month = find_peak_month(monthly) if counted else None
    hourly = estimate_hourly_distribution(total)

    active = [day for day in days if day.count > 0]
    weekend = weekday[0] + weekday[6]

    _log.debug(
        "Activity: %d day(s), %d active, longest streak %d, current %d",
        len(days), len(active), streaks.longest, streaks.current,
    )
    return ActivitySummary(
        longest_streak=streaks.longest,
        longest_streak_start=streaks.longest_start,
        longest_streak_end=streaks.longest_end,
        current_streak=streaks.current,
        busiest_day=WEEKDAY_NAMES[busiest[0]] if busiest else None,
        busiest_day_count=busiest[1] if busiest else 0,
        busiest_hour=hourly.peak_hour,
        hourly_estimate=hourly,
        peak_month=peak_month[0] if peak_month else None,
        peak_month_count=peak_month[1] if peak_month else 0,
        total_active_days=len(active),
        total_days=len(days),
        first_contribution=active[0].date if active else None,
        last_contribution=active[-1].date if active else None,
        average_per_day=average_per_active_day(total, len(active)),
        average_per_week=one_decimal(total, WEEKS_PER_YEAR),
        weekend_ratio=round(weekend / counted, 3) if counted else 0.0,
        weekday_distribution=weekday,
        monthly_distribution=monthly,
    )
