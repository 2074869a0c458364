"""
Cost Model for Appliance Scheduling

Cost functions used to price a schedule and the pessimistic baseline that
savings are measured against.

Baseline:
    Every appliance is priced at the single most expensive hour of the day,
    regardless of its own restrictions, so the baseline is a pessimistic
    reference rather than a realistic unoptimized cost.
"""

from typing import List, Sequence

from tarifa.optimization.appliance_models import Appliance, HourlyPriceRecord


def calculate_single_hour_cost(
    appliance: Appliance,
    record: HourlyPriceRecord,
) -> float:
    """Price a whole run at a single hour's price.

    Used when no consecutive block is available; the run is assumed to cost
    the anchor hour's price for its full duration.

    Args:
        appliance: Appliance being scheduled
        record: Anchor hour

    Returns:
        Cost in EUR
    """
    return appliance.energy_kwh * record.price_per_kwh


def hour_weights(duration_hours: float, block_length: int) -> List[float]:
    """Fraction of each block hour the appliance actually runs.

    A 2.5h run over a 3-hour block gives [1.0, 1.0, 0.5].
    """
    return [min(1.0, duration_hours - i) for i in range(block_length)]


def calculate_block_cost(
    appliance: Appliance,
    block: Sequence[HourlyPriceRecord],
) -> float:
    """Price a run over a block of consecutive hours.

    Each hour costs ``power_kw * price`` for the fraction of it the appliance
    runs. If the block is shorter than the run, the whole run is priced at the
    first hour of the block instead.

    Args:
        appliance: Appliance being scheduled
        block: Consecutive hours in run order

    Returns:
        Cost in EUR
    """
    if not block:
        return 0.0

    weights = hour_weights(appliance.duration_hours, len(block))
    if sum(weights) < appliance.duration_hours:
        return calculate_single_hour_cost(appliance, block[0])

    return sum(
        appliance.power_kw * weight * record.price_per_kwh
        for weight, record in zip(weights, block)
    )


def average_price(appliance: Appliance, cost: float) -> float:
    """Energy-weighted average price of a run in EUR/kWh."""
    energy = appliance.energy_kwh
    if energy <= 0:
        return 0.0
    return cost / energy


def calculate_baseline_cost(
    appliances: Sequence[Appliance],
    prices: Sequence[HourlyPriceRecord],
) -> float:
    """Calculate cost with no optimization (every run at the day's worst price).

    Args:
        appliances: Appliances to price
        prices: Day price curve

    Returns:
        Baseline cost in EUR (0 when there is nothing to price)
    """
    if not appliances or not prices:
        return 0.0

    worst_price = max(p.price_per_kwh for p in prices)
    return sum(a.energy_kwh * worst_price for a in appliances)
