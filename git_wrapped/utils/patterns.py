from collections.abc import Iterable, Mapping
from typing import TypeVar

K = TypeVar("K")

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def find_peak(distribution: Mapping[K, float], order: Iterable[K] | None = None) -> tuple[K, float] | None:
    """Return the (key, value) pair holding the largest value.

    Keys are visited in ``order`` (default: the mapping's own order) and a key
    only replaces the current peak when strictly larger, so the first maximum
    wins ties. Returns None for an empty distribution.
    """
    keys = list(order) if order is not None else list(distribution)
    peak: tuple[K, float] | None = None
    for key in keys:
        value = distribution.get(key, 0)
        if peak is None or value > peak[1]:
            peak = (key, value)
    return peak


def one_decimal(numerator: float, denominator: float) -> str:
    """Format ``numerator / denominator`` with one decimal; "0" when the denominator is 0."""
    if not denominator:
        return "0"
    return f"{numerator / denominator:.1f}"


def percentage(part: float, whole: float) -> str:
    """Share of ``whole`` as a one-decimal percentage string; "0" when ``whole`` is 0."""
    if not whole:
        return "0"
    return f"{part / whole * 100:.1f}"
