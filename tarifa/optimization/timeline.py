"""
Day Timeline and Per-Appliance Recommendations

Helpers that turn optimizer output into views the presentation layer can
render directly:

- build_day_timeline: which appliances run in each of the 24 hours, with the
  total power and cost per hour
- get_recommendation: best/worst time and potential savings for a single
  appliance, independent of any other appliance
- generate_text_schedule: plain-text rendering of a day timeline
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from tarifa.optimization.appliance_models import (
    HOURS_PER_DAY,
    Appliance,
    HourlyPriceRecord,
    OptimizedSchedule,
    format_hour,
)
from tarifa.optimization.objective import hour_weights
from tarifa.optimization.price_stats import sort_by_price


# Potential savings (EUR) above which a run is worth moving
SIGNIFICANT_SAVINGS_EUR = 0.50
MODERATE_SAVINGS_EUR = 0.20

NOT_AVAILABLE = "Not available"


@dataclass
class TimelineSlot:
    """Load on one hour of the day."""

    hour: int
    appliance_ids: List[str] = field(default_factory=list)
    total_power_watts: float = 0.0
    total_cost_eur: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour": self.hour,
            "appliance_ids": list(self.appliance_ids),
            "total_power_watts": self.total_power_watts,
            "total_cost_eur": self.total_cost_eur,
        }


@dataclass(frozen=True)
class ApplianceRecommendation:
    """Best time to run one appliance on its own."""

    best_time: str
    worst_time: str
    potential_savings_eur: float
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_time": self.best_time,
            "worst_time": self.worst_time,
            "potential_savings_eur": self.potential_savings_eur,
            "recommendation": self.recommendation,
        }


def build_day_timeline(
    schedules: Sequence[OptimizedSchedule],
    appliances: Sequence[Appliance],
    prices: Sequence[HourlyPriceRecord],
) -> List[TimelineSlot]:
    """Spread each schedule over the hours it covers.

    Schedules whose appliance is not in `appliances` are skipped. Overlapping
    runs simply add up; no capacity limit is checked.

    A schedule's ``estimated_cost_eur`` is split across its hours in
    proportion to what each hour costs at its own price, so the hourly costs
    of a run always add up to its estimate. For a block run the split is each
    hour's own cost; a run priced at its start hour (restriction fallback or
    no consecutive block) keeps that total, shared out by hourly price.

    Args:
        schedules: Optimizer output
        appliances: Appliances the schedules refer to
        prices: Day price curve used to weight each hour

    Returns:
        24 slots, hour 0 first
    """
    timeline = [TimelineSlot(hour=hour) for hour in range(HOURS_PER_DAY)]
    by_id = {a.id: a for a in appliances}
    price_at = {p.hour: p.price_per_kwh for p in prices}

    for schedule in schedules:
        appliance = by_id.get(schedule.appliance_id)
        if appliance is None:
            continue

        hours = schedule.covered_hours()
        weights = hour_weights(schedule.duration_hours, len(hours))
        own_costs = [
            appliance.power_kw * weight * price_at.get(hour, 0.0)
            for hour, weight in zip(hours, weights)
        ]
        # An all-zero run is split by run time
        shares = own_costs if sum(own_costs) > 0 else weights
        total_share = sum(shares)

        for hour, share in zip(hours, shares):
            slot = timeline[hour]
            slot.appliance_ids.append(appliance.id)
            slot.total_power_watts += appliance.power_watts
            if total_share > 0:
                slot.total_cost_eur += schedule.estimated_cost_eur * share / total_share

    return timeline


def get_recommendation(
    appliance: Appliance,
    prices: Sequence[HourlyPriceRecord],
) -> ApplianceRecommendation:
    """Compare running an appliance at the day's best vs worst hour.

    Args:
        appliance: Appliance to advise on
        prices: Day price curve

    Returns:
        ApplianceRecommendation (placeholder values when there are no prices)
    """
    if not prices:
        return ApplianceRecommendation(
            best_time=NOT_AVAILABLE,
            worst_time=NOT_AVAILABLE,
            potential_savings_eur=0.0,
            recommendation="No price data available",
        )

    ordered = sort_by_price(prices)
    best, worst = ordered[0], ordered[-1]
    savings = appliance.energy_kwh * (worst.price_per_kwh - best.price_per_kwh)

    window = (
        f"{format_hour(best.hour)} and "
        f"{format_hour((best.hour + appliance.duration_hours) % HOURS_PER_DAY)}"
    )
    if savings > SIGNIFICANT_SAVINGS_EUR:
        message = f"Running between {window} can save you {savings:.2f} EUR."
    elif savings > MODERATE_SAVINGS_EUR:
        message = f"Running between {window} saves a little: {savings:.2f} EUR."
    else:
        message = "Potential savings are minimal. Run it whenever suits you."

    return ApplianceRecommendation(
        best_time=format_hour(best.hour),
        worst_time=format_hour(worst.hour),
        potential_savings_eur=savings,
        recommendation=message,
    )


def generate_text_schedule(timeline: Sequence[TimelineSlot]) -> str:
    """Render a day timeline as text, one line per busy hour."""
    lines = ["HOUR   POWER(W)   COST(EUR)  APPLIANCES"]
    for slot in timeline:
        if not slot.appliance_ids:
            continue
        lines.append(
            f"{format_hour(slot.hour)}  {slot.total_power_watts:>9.0f}  "
            f"{slot.total_cost_eur:>10.4f}  {', '.join(slot.appliance_ids)}"
        )
    if len(lines) == 1:
        lines.append("(nothing scheduled)")
    return "\n".join(lines)
