import random
from datetime import date, timedelta

from git_wrapped.analyzers.activity import (
    HOURLY_WEIGHTS,
    average_per_active_day,
    compute_monthly_distribution,
    compute_streaks,
    compute_weekday_distribution,
    estimate_hourly_distribution,
    find_busiest_day,
    find_peak_month,
    summarize_activity,
)
from git_wrapped.models import ActivityDay

START = date(2025, 1, 1)


def _days(counts: list[int], start: date = START) -> list[ActivityDay]:
    days = []
    for offset, count in enumerate(counts):
        day = start + timedelta(days=offset)
        days.append(ActivityDay(date=day, count=count, weekday=day.isoweekday() % 7))
    return days


def test_single_run_of_47_days_mid_year():
    counts = [0] * 365
    for n in range(100, 147):  # days 100..146, 1-based
        counts[n - 1] = 3
    result = compute_streaks(_days(counts))
    assert result.longest == 47
    assert result.longest_start == START + timedelta(days=99)
    assert result.longest_end == START + timedelta(days=145)
    assert result.current == 0


def test_trailing_run_is_merged_into_longest():
    counts = [0] * 353 + [1] * 12
    for n in range(10, 15):
        counts[n] = 2
    result = compute_streaks(_days(counts))
    assert result.current == 12
    assert result.longest == 12
    assert result.longest_start == START + timedelta(days=353)
    assert result.longest_end == START + timedelta(days=364)


def test_earlier_longer_run_keeps_its_dates():
    counts = [1] * 20 + [0] + [1] * 5
    result = compute_streaks(_days(counts))
    assert result.longest == 20
    assert result.longest_start == START
    assert result.longest_end == START + timedelta(days=19)
    assert result.current == 5


def test_equal_runs_keep_the_first():
    counts = [1, 1, 0, 1, 1, 0]
    result = compute_streaks(_days(counts))
    assert result.longest == 2
    assert result.longest_start == START


def test_empty_sequence_has_no_streaks():
    result = compute_streaks([])
    assert result.longest == 0
    assert result.current == 0
    assert result.longest_start is None


def test_longest_never_below_current_on_random_sequences():
    rng = random.Random(1234)
    for _ in range(200):
        counts = [rng.choice([0, 0, 1, 2, 5]) for _ in range(rng.randint(1, 120))]
        result = compute_streaks(_days(counts))
        assert result.longest >= result.current


def test_weekday_distribution_has_all_keys_and_preserves_total():
    rng = random.Random(7)
    counts = [rng.randint(0, 9) for _ in range(40)]
    days = _days(counts)
    distribution = compute_weekday_distribution(days)
    assert sorted(distribution) == list(range(7))
    assert sum(distribution.values()) == sum(counts)
    assert compute_weekday_distribution([]) == {w: 0 for w in range(7)}


def test_monthly_distribution_only_has_months_in_range():
    days = _days([1] * 40, start=date(2025, 1, 15))
    distribution = compute_monthly_distribution(days)
    assert list(distribution) == ["2025-01", "2025-02"]
    assert distribution["2025-01"] == 17
    assert distribution["2025-02"] == 23


def test_busiest_day_tie_goes_to_earliest_weekday():
    distribution = {0: 0, 1: 4, 2: 0, 3: 4, 4: 0, 5: 0, 6: 0}
    assert find_busiest_day(distribution) == (1, 4)


def test_peak_month_tie_goes_to_earliest_month():
    assert find_peak_month({"2025-03": 8, "2025-01": 8, "2025-02": 1}) == ("2025-01", 8)


def test_hourly_weights_sum_to_whole_and_peak_at_two_pm():
    assert sum(HOURLY_WEIGHTS) == 1000
    assert len(HOURLY_WEIGHTS) == 24
    assert max(range(24), key=lambda h: HOURLY_WEIGHTS[h]) == 14


def test_hourly_distribution_is_flagged_as_estimate():
    estimate = estimate_hourly_distribution(1000)
    assert estimate.estimated is True
    assert estimate.peak_hour == 14
    assert estimate.distribution[14] == 150
    assert sorted(estimate.distribution) == list(range(24))


def test_hourly_distribution_of_zero_has_no_peak():
    estimate = estimate_hourly_distribution(0)
    assert estimate.peak_hour is None
    assert all(v == 0 for v in estimate.distribution.values())


def test_average_per_active_day():
    assert average_per_active_day(10, 4) == "2.5"
    assert average_per_active_day(10, 0) == "0"


def test_summarize_empty_activity():
    summary = summarize_activity([])
    assert summary.longest_streak == 0
    assert summary.busiest_day is None
    assert summary.peak_month is None
    assert summary.average_per_day == "0"
    assert summary.weekend_ratio == 0.0
    assert summary.monthly_distribution == {}
    assert summary.hourly_estimate.estimated is True


def test_summarize_activity_figures():
    # 2025-01-04 is a Saturday, 2025-01-05 a Sunday
    days = _days([2, 6, 0, 4], start=date(2025, 1, 4))
    summary = summarize_activity(days, total_contributions=12)
    assert summary.busiest_day == "Sunday"
    assert summary.busiest_day_count == 6
    assert summary.total_active_days == 3
    assert summary.total_days == 4
    assert summary.first_contribution == date(2025, 1, 4)
    assert summary.last_contribution == date(2025, 1, 7)
    assert summary.average_per_day == "4.0"
    assert summary.weekend_ratio == round(8 / 12, 3)
    assert summary.peak_month == "2025-01"
