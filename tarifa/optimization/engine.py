"""
Optimization Engine

Top-level entry point of the optimizer: schedules every appliance against a
day's price curve and reports the result against the worst-case baseline.

The engine is a pure function of its inputs. It keeps no cache; callers that
re-run it on every input change should debounce on their side.
"""

import time
from typing import Optional, Sequence

import structlog

from tarifa.optimization.appliance_models import (
    Appliance,
    HourlyPriceRecord,
    OptimizationConfig,
    OptimizationResult,
)
from tarifa.optimization.exceptions import InvalidInputError
from tarifa.optimization.objective import calculate_baseline_cost
from tarifa.optimization.scheduler import ScheduleOptimizer

logger = structlog.get_logger(__name__)


class OptimizationEngine:
    """Combines the schedule optimizer and the baseline cost model.

    Example:
        engine = OptimizationEngine()
        result = engine.optimize(appliances, prices)
        print(result.summary())
    """

    def __init__(self, config: Optional[OptimizationConfig] = None):
        """Initialize the engine.

        Args:
            config: Optimization configuration (uses defaults if not provided)
        """
        self.config = config or OptimizationConfig()
        self.scheduler = ScheduleOptimizer(self.config)

    def optimize(
        self,
        appliances: Sequence[Appliance],
        prices: Sequence[HourlyPriceRecord],
    ) -> OptimizationResult:
        """Schedule appliances and compute costs and savings.

        Args:
            appliances: Appliances to schedule
            prices: Day price curve (24 hourly records, any order)

        Returns:
            OptimizationResult; empty when there are no appliances

        Raises:
            InvalidInputError: If appliances are given without a price curve
        """
        if not appliances:
            return OptimizationResult.empty()
        if not prices:
            raise InvalidInputError("Cannot schedule appliances without a price curve")

        started = time.perf_counter()

        baseline_cost = calculate_baseline_cost(appliances, prices)
        schedules = self.scheduler.schedule(appliances, prices)
        optimized_cost = sum(s.estimated_cost_eur for s in schedules)

        total_savings = baseline_cost - optimized_cost
        savings_percentage = (
            total_savings / baseline_cost * 100 if baseline_cost > 0 else 0.0
        )

        logger.info(
            "optimization_completed",
            appliances=len(appliances),
            scheduled=len(schedules),
            baseline_cost=round(baseline_cost, 4),
            optimized_cost=round(optimized_cost, 4),
            savings_percentage=round(savings_percentage, 2),
            reservation_strategy=self.config.reservation_strategy.value,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )

        return OptimizationResult(
            schedules=schedules,
            baseline_cost_eur=baseline_cost,
            optimized_cost_eur=optimized_cost,
            total_savings_eur=total_savings,
            savings_percentage=savings_percentage,
        )


def optimize_appliances(
    appliances: Sequence[Appliance],
    prices: Sequence[HourlyPriceRecord],
    config: Optional[OptimizationConfig] = None,
) -> OptimizationResult:
    """Quick optimization function for simple use cases.

    Args:
        appliances: Appliances to schedule
        prices: Day price curve
        config: Optional configuration

    Returns:
        OptimizationResult
    """
    return OptimizationEngine(config).optimize(appliances, prices)
