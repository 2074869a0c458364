"""
Scheduling Constraints for Appliance Slot Selection

This module holds the two checks the scheduler applies to candidate hours:

- Restriction filtering: an hour is unusable for an appliance if it falls
  inside any of the appliance's forbidden windows. Preferred windows are
  accepted but never block an hour.
- Consecutive block search: find the first run of adjacent hours of a given
  length among a set of candidate hours.

Windows are evaluated at hour granularity; the minutes of "HH:MM" bounds
are truncated, so "07:45" behaves like "07:00".
"""

from typing import List, Sequence, TypeVar

from tarifa.optimization.appliance_models import (
    HourlyPriceRecord,
    RestrictionKind,
    TimeRestriction,
)


R = TypeVar("R", bound=HourlyPriceRecord)


def is_hour_in_window(hour: int, start_hour: int, end_hour: int) -> bool:
    """Check whether an hour falls in the half-open window [start, end).

    A window whose start is after its end wraps past midnight.

    Args:
        hour: Hour of day (0-23)
        start_hour: First hour of the window
        end_hour: First hour after the window

    Returns:
        True if the hour lies inside the window
    """
    if start_hour <= end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


def is_hour_usable(hour: int, restrictions: Sequence[TimeRestriction]) -> bool:
    """Check whether an appliance may run at the given hour.

    Args:
        hour: Hour of day (0-23)
        restrictions: The appliance's time restrictions

    Returns:
        False if any forbidden window covers the hour, True otherwise
    """
    for restriction in restrictions:
        if restriction.kind is not RestrictionKind.FORBIDDEN:
            # preferred windows are advisory only
            continue
        if is_hour_in_window(hour, restriction.start_hour, restriction.end_hour):
            return False
    return True


def filter_usable(
    candidates: Sequence[R],
    restrictions: Sequence[TimeRestriction],
) -> List[R]:
    """Drop candidates that fall inside a forbidden window, keeping order."""
    return [c for c in candidates if is_hour_usable(c.hour, restrictions)]


def find_consecutive_block(candidates: Sequence[R], length: int) -> List[R]:
    """Find the first run of `length` adjacent hours among the candidates.

    Candidates are re-sorted by hour, so the block returned is the one with
    the lowest starting hour, not necessarily the cheapest. Runs do not wrap
    past midnight.

    Args:
        candidates: Candidate hours (any order)
        length: Number of consecutive hours required

    Returns:
        The block in ascending hour order, or an empty list if none exists
    """
    if length <= 0 or length > len(candidates):
        return []

    hours = sorted(candidates, key=lambda c: c.hour)

    for i in range(len(hours) - length + 1):
        block = hours[i:i + length]
        if all(
            block[j].hour == block[j - 1].hour + 1 for j in range(1, length)
        ):
            return block

    return []
