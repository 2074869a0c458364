"""
Greedy Priority Scheduler for Appliance Slot Assignment

Assigns each appliance a run window, one appliance at a time, in priority
order (high, then medium, then low; input order within a priority).

Algorithm per appliance:
1. Candidates = all hours ordered cheapest first, minus hours already used
2. Drop candidates inside the appliance's forbidden windows
3. If nothing is left, take the cheapest unused hour ignoring restrictions
4. Otherwise grow a cheapest-first prefix of the candidates until it holds
   a consecutive block covering the run
5. Without a block, anchor the run on the cheapest candidate hour
6. Reserve hours for later appliances per the reservation strategy

The allocation is greedy: an appliance never gives up an hour it claimed to
make room for a later one, so the result is not a joint optimum.
"""

from typing import List, Optional, Sequence, Set

import structlog

from tarifa.optimization.appliance_models import (
    HOURS_PER_DAY,
    Appliance,
    HourlyPriceRecord,
    OptimizationConfig,
    OptimizedSchedule,
    ReservationStrategy,
    format_hour,
)
from tarifa.optimization.constraints import filter_usable, find_consecutive_block
from tarifa.optimization.objective import (
    average_price,
    calculate_block_cost,
    calculate_single_hour_cost,
)
from tarifa.optimization.price_stats import sort_by_price

logger = structlog.get_logger(__name__)


def order_by_priority(appliances: Sequence[Appliance]) -> List[Appliance]:
    """Order appliances high > medium > low, stable within a priority."""
    return sorted(appliances, key=lambda a: a.priority.rank)


class ScheduleOptimizer:
    """Per-appliance greedy slot allocator.

    Holds no state between calls to ``schedule``; the used-hours set lives
    only for the duration of one run.

    Example:
        optimizer = ScheduleOptimizer()
        schedules = optimizer.schedule(appliances, prices)
    """

    def __init__(self, config: Optional[OptimizationConfig] = None):
        """Initialize the optimizer.

        Args:
            config: Optimization configuration (uses defaults if not provided)
        """
        self.config = config or OptimizationConfig()

    def schedule(
        self,
        appliances: Sequence[Appliance],
        prices: Sequence[HourlyPriceRecord],
    ) -> List[OptimizedSchedule]:
        """Assign a run window to every appliance that can get one.

        Args:
            appliances: Appliances to schedule (not mutated)
            prices: Day price curve (any order)

        Returns:
            Schedules in the order the appliances were processed
        """
        sorted_hours = sort_by_price(prices)
        used_hours: Set[int] = set()
        schedules: List[OptimizedSchedule] = []

        for appliance in order_by_priority(appliances):
            schedule = self.find_best_slot(appliance, sorted_hours, used_hours)
            if schedule is None:
                logger.warning(
                    "appliance_not_scheduled",
                    appliance_id=appliance.id,
                    reason="all_hours_used",
                )
                continue

            schedules.append(schedule)
            used_hours.update(self._reserved_hours(schedule))

        return schedules

    def find_best_slot(
        self,
        appliance: Appliance,
        sorted_hours: Sequence[HourlyPriceRecord],
        used_hours: Set[int],
    ) -> Optional[OptimizedSchedule]:
        """Find the best run window for one appliance.

        Args:
            appliance: Appliance to place
            sorted_hours: Day price curve, cheapest first
            used_hours: Hours claimed by earlier appliances

        Returns:
            The schedule, or None when every hour is already used
        """
        free_hours = [h for h in sorted_hours if h.hour not in used_hours]
        available = filter_usable(free_hours, appliance.restrictions)

        if not available:
            if not free_hours:
                return None
            logger.debug(
                "restriction_fallback",
                appliance_id=appliance.id,
                hour=free_hours[0].hour,
            )
            return self._single_hour_schedule(appliance, free_hours[0])

        length = self.config.block_rounding.block_length(appliance.duration_hours)
        block = self.find_cheap_block(available, length)

        if block:
            cost = calculate_block_cost(appliance, block)
            return self._build_schedule(appliance, block[0], cost)

        return self._single_hour_schedule(appliance, available[0])

    @staticmethod
    def find_cheap_block(
        available: Sequence[HourlyPriceRecord],
        length: int,
    ) -> List[HourlyPriceRecord]:
        """Find a consecutive block made of the cheapest available hours.

        Searches the k cheapest candidates for k = length, length + 1, ...
        and returns the first block found, so the block's dearest hour is as
        cheap as possible. Within one k the lowest starting hour wins.

        Args:
            available: Usable hours, cheapest first
            length: Block length in hours

        Returns:
            The block in hour order, or an empty list if none exists
        """
        for k in range(max(length, 1), len(available) + 1):
            block = find_consecutive_block(available[:k], length)
            if block:
                return block
        return []

    def _single_hour_schedule(
        self,
        appliance: Appliance,
        record: HourlyPriceRecord,
    ) -> OptimizedSchedule:
        cost = calculate_single_hour_cost(appliance, record)
        return self._build_schedule(appliance, record, cost)

    @staticmethod
    def _build_schedule(
        appliance: Appliance,
        start: HourlyPriceRecord,
        cost: float,
    ) -> OptimizedSchedule:
        return OptimizedSchedule(
            appliance_id=appliance.id,
            start_time=format_hour(start.hour),
            end_time=format_hour((start.hour + appliance.duration_hours) % HOURS_PER_DAY),
            duration_hours=appliance.duration_hours,
            estimated_cost_eur=cost,
            average_price_per_kwh=average_price(appliance, cost),
        )

    def _reserved_hours(self, schedule: OptimizedSchedule) -> List[int]:
        """Hours a placed schedule removes from later candidate pools."""
        if self.config.reservation_strategy is ReservationStrategy.FULL_SPAN:
            return schedule.covered_hours()
        return [schedule.start_hour]
