"""
Greedy Appliance Scheduling Optimization Module

This module schedules household appliances against a day's hourly
electricity price curve to minimize cost.

Key Components:
- appliance_models: Data models for appliances, prices and results
- price_stats: Curve statistics and cheap/normal/expensive categories
- constraints: Forbidden-window filtering and consecutive block search
- objective: Schedule cost functions and the worst-case baseline
- scheduler: Priority-ordered greedy slot allocator
- engine: Top-level optimize() entry point
- validation: Appliance record validation
- timeline: Day timeline and per-appliance recommendations

Algorithm Overview:
Appliances are placed one at a time, high priority first. Each takes the
cheapest consecutive block of usable hours that covers its run, falling back
to a single cheapest hour when no block exists. Savings are reported against
running every appliance at the day's most expensive hour.

Example Usage:
    from tarifa.optimization import (
        Appliance, OptimizationEngine, Priority, build_price_curve,
    )

    engine = OptimizationEngine()
    result = engine.optimize(
        [Appliance(id="dw", name="Dishwasher", power_watts=1500,
                   duration_hours=2, priority=Priority.HIGH)],
        build_price_curve(prices),
    )
    print(f"Savings vs baseline: {result.savings_percentage:.1f}%")
"""

from tarifa.optimization.appliance_models import (
    Appliance,
    BlockRounding,
    HourlyPriceRecord,
    OptimizationConfig,
    OptimizationResult,
    OptimizedSchedule,
    PriceCategory,
    PriceStats,
    Priority,
    ReservationStrategy,
    RestrictionKind,
    TimeRestriction,
    build_price_curve,
)
from tarifa.optimization.engine import OptimizationEngine, optimize_appliances
from tarifa.optimization.exceptions import (
    InvalidInputError,
    OptimizationError,
    ValidationError,
)
from tarifa.optimization.price_stats import (
    calculate_price_stats,
    get_best_hours,
    get_price_category,
    get_worst_hours,
)
from tarifa.optimization.scheduler import ScheduleOptimizer
from tarifa.optimization.validation import validate_appliance, validate_appliance_or_raise

__all__ = [
    "Appliance",
    "BlockRounding",
    "HourlyPriceRecord",
    "OptimizationConfig",
    "OptimizationResult",
    "OptimizedSchedule",
    "PriceCategory",
    "PriceStats",
    "Priority",
    "ReservationStrategy",
    "RestrictionKind",
    "TimeRestriction",
    "build_price_curve",
    "OptimizationEngine",
    "optimize_appliances",
    "InvalidInputError",
    "OptimizationError",
    "ValidationError",
    "calculate_price_stats",
    "get_best_hours",
    "get_price_category",
    "get_worst_hours",
    "ScheduleOptimizer",
    "validate_appliance",
    "validate_appliance_or_raise",
]
