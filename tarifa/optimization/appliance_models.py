"""
Appliance and Price Data Models for Schedule Optimization

This module defines the data structures for representing appliances,
their time restrictions, the hourly price curve, and optimization results.

Time Convention:
- All times are in 24-hour format ("HH:MM" strings, hours 0-23)
- The price curve has one slot per hour: slot 0 = 00:00-01:00, slot 23 = 23:00-24:00
- Prices are in EUR/kWh, raw market prices in EUR/MWh

Appliances and schedules are kept as separate flat collections joined by
``appliance_id``; a schedule never holds a reference back to its appliance.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


HOURS_PER_DAY = 24


class Priority(str, Enum):
    """Priority levels for appliance scheduling.

    Higher priority appliances claim cheap hours before lower ones.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key: lower rank is scheduled first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}


class RestrictionKind(str, Enum):
    """Kinds of time restriction an appliance may carry."""

    FORBIDDEN = "forbidden"
    PREFERRED = "preferred"


class ReservationStrategy(str, Enum):
    """Which hours an assigned appliance removes from later candidate pools.

    START_HOUR reserves only the start hour, so a 3-hour appliance leaves
    its remaining hours available to lower-priority appliances.
    FULL_SPAN reserves every hour the appliance runs in.
    """

    START_HOUR = "start_hour"
    FULL_SPAN = "full_span"


class BlockRounding(str, Enum):
    """How a fractional duration becomes a consecutive block length.

    CEIL covers the whole run (1.5h needs a 2-hour block).
    TRUNCATE drops the fraction (1.5h searches for a 1-hour block).
    """

    CEIL = "ceil"
    TRUNCATE = "truncate"

    def block_length(self, duration_hours: float) -> int:
        """Number of whole hour slots to search for."""
        if self is BlockRounding.CEIL:
            return int(math.ceil(duration_hours))
        return int(duration_hours)


class PriceCategory(str, Enum):
    """Three-tier price classification relative to the day's range."""

    CHEAP = "cheap"
    NORMAL = "normal"
    EXPENSIVE = "expensive"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    PriceCategory.CHEAP: "Cheap",
    PriceCategory.NORMAL: "Normal",
    PriceCategory.EXPENSIVE: "Expensive",
}


def parse_hour(value: str) -> int:
    """Get the hour component of an "HH:MM" string.

    Minutes are truncated: "07:45" -> 7.
    """
    return int(value.split(":")[0])


def format_hour(hour: float) -> str:
    """Format a (possibly fractional) hour of day as "HH:MM".

    Args:
        hour: Hour of day, e.g. 3 or 3.5

    Returns:
        "03:00" or "03:30"
    """
    total_minutes = int(round(hour * 60)) % (HOURS_PER_DAY * 60)
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def convert_mwh_to_kwh(price_mwh: float) -> float:
    """Convert EUR/MWh to EUR/kWh, rounded to 6 decimals."""
    return round(price_mwh / 1000, 6)


def convert_kwh_to_mwh(price_kwh: float) -> float:
    """Convert EUR/kWh to EUR/MWh, rounded to 2 decimals."""
    return round(price_kwh * 1000, 2)


@dataclass(frozen=True)
class TimeRestriction:
    """A time window attached to an appliance.

    Attributes:
        start: Window start, "HH:MM"
        end: Window end, "HH:MM"; end < start means the window crosses midnight
        kind: FORBIDDEN windows block scheduling, PREFERRED ones are advisory
    """

    start: str
    end: str
    kind: RestrictionKind = RestrictionKind.FORBIDDEN

    def __post_init__(self):
        if not isinstance(self.kind, RestrictionKind):
            object.__setattr__(self, "kind", RestrictionKind(self.kind))

    @property
    def start_hour(self) -> int:
        return parse_hour(self.start)

    @property
    def end_hour(self) -> int:
        return parse_hour(self.end)

    @property
    def crosses_midnight(self) -> bool:
        return self.start_hour > self.end_hour

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "kind": self.kind.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeRestriction":
        return cls(
            start=data["start"],
            end=data["end"],
            kind=RestrictionKind(data.get("kind", data.get("type", "forbidden"))),
        )


@dataclass(frozen=True)
class Appliance:
    """Represents a household appliance to be scheduled.

    Owned by the caller. The optimizer treats it as read-only input.

    Attributes:
        id: Unique, stable identifier
        name: Human-readable name
        power_watts: Power draw in watts
        duration_hours: Required run time in hours, in (0, 24]
        priority: Scheduling priority
        restrictions: Forbidden/preferred time windows
    """

    id: str
    name: str
    power_watts: float
    duration_hours: float
    priority: Priority = Priority.MEDIUM
    restrictions: Tuple[TimeRestriction, ...] = ()

    def __post_init__(self):
        if not isinstance(self.priority, Priority):
            object.__setattr__(self, "priority", Priority(self.priority))
        object.__setattr__(self, "restrictions", tuple(self.restrictions))

    @property
    def power_kw(self) -> float:
        return self.power_watts / 1000

    @property
    def energy_kwh(self) -> float:
        """Total energy consumed by one run in kWh."""
        return self.power_watts * self.duration_hours / 1000

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "power_watts": self.power_watts,
            "duration_hours": self.duration_hours,
            "priority": self.priority.value,
            "restrictions": [r.to_dict() for r in self.restrictions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Appliance":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            power_watts=float(data["power_watts"]),
            duration_hours=float(data["duration_hours"]),
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            restrictions=tuple(
                TimeRestriction.from_dict(r) for r in data.get("restrictions") or []
            ),
        )


@dataclass(frozen=True)
class HourlyPriceRecord:
    """Price of electricity for one hour of the day.

    Attributes:
        hour: Hour of day (0-23)
        price_per_kwh: Price in EUR/kWh
        timestamp: Start of the hour
        price_raw_per_mwh: Market price in EUR/MWh (derived when omitted)
        is_tomorrow: True for next-day records
    """

    hour: int
    price_per_kwh: float
    timestamp: Optional[datetime] = None
    price_raw_per_mwh: Optional[float] = None
    is_tomorrow: bool = False

    def __post_init__(self):
        if not 0 <= self.hour < HOURS_PER_DAY:
            raise ValueError(f"Hour must be 0-23, got {self.hour}")
        if self.price_raw_per_mwh is None:
            object.__setattr__(
                self, "price_raw_per_mwh", convert_kwh_to_mwh(self.price_per_kwh)
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour": self.hour,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "price_per_kwh": self.price_per_kwh,
            "price_raw_per_mwh": self.price_raw_per_mwh,
            "is_tomorrow": self.is_tomorrow,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HourlyPriceRecord":
        timestamp = data.get("timestamp")
        return cls(
            hour=int(data["hour"]),
            price_per_kwh=float(data["price_per_kwh"]),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            price_raw_per_mwh=data.get("price_raw_per_mwh"),
            is_tomorrow=bool(data.get("is_tomorrow", False)),
        )


def build_price_curve(
    prices: Sequence[float],
    day: Optional[date] = None,
) -> List[HourlyPriceRecord]:
    """Create a price curve from a list of EUR/kWh values, one per hour.

    Args:
        prices: Prices in hour order, starting at 00:00
        day: Day the prices belong to (sets record timestamps)

    Returns:
        List of HourlyPriceRecord
    """
    midnight = datetime.combine(day, time()) if day else None
    return [
        HourlyPriceRecord(
            hour=hour,
            price_per_kwh=float(price),
            timestamp=midnight + timedelta(hours=hour) if midnight else None,
        )
        for hour, price in enumerate(prices)
    ]


@dataclass(frozen=True)
class OptimizedSchedule:
    """Suggested run window for a single appliance.

    Attributes:
        appliance_id: Id of the scheduled appliance
        start_time: Start, "HH:MM"
        end_time: End, "HH:MM" (wraps past midnight)
        duration_hours: Run time in hours
        estimated_cost_eur: Estimated cost of the run
        average_price_per_kwh: Energy-weighted price over the run
    """

    appliance_id: str
    start_time: str
    end_time: str
    duration_hours: float
    estimated_cost_eur: float
    average_price_per_kwh: float

    @property
    def start_hour(self) -> int:
        return parse_hour(self.start_time)

    def covered_hours(self) -> List[int]:
        """Hours of the day this run occupies, in run order."""
        return [
            (self.start_hour + offset) % HOURS_PER_DAY
            for offset in range(int(math.ceil(self.duration_hours)))
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appliance_id": self.appliance_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_hours": self.duration_hours,
            "estimated_cost_eur": self.estimated_cost_eur,
            "average_price_per_kwh": self.average_price_per_kwh,
        }


@dataclass
class OptimizationResult:
    """Complete optimization result.

    Attributes:
        schedules: One schedule per appliance that received an assignment
        baseline_cost_eur: Cost if every appliance ran at the day's worst price
        optimized_cost_eur: Sum of the schedules' estimated costs
        total_savings_eur: baseline - optimized
        savings_percentage: Savings relative to baseline (0 if baseline is 0)
    """

    schedules: List[OptimizedSchedule] = field(default_factory=list)
    baseline_cost_eur: float = 0.0
    optimized_cost_eur: float = 0.0
    total_savings_eur: float = 0.0
    savings_percentage: float = 0.0

    @classmethod
    def empty(cls) -> "OptimizationResult":
        return cls()

    def schedule_for(self, appliance_id: str) -> Optional[OptimizedSchedule]:
        """Get the schedule assigned to an appliance, if any."""
        for schedule in self.schedules:
            if schedule.appliance_id == appliance_id:
                return schedule
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "schedules": [s.to_dict() for s in self.schedules],
            "baseline_cost_eur": self.baseline_cost_eur,
            "optimized_cost_eur": self.optimized_cost_eur,
            "total_savings_eur": self.total_savings_eur,
            "savings_percentage": self.savings_percentage,
        }

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "=" * 60,
            "OPTIMIZATION RESULT SUMMARY",
            "=" * 60,
            f"  Baseline Cost: {self.baseline_cost_eur:.2f} EUR",
            f"  Optimized Cost: {self.optimized_cost_eur:.2f} EUR",
            f"  Savings: {self.total_savings_eur:.2f} EUR ({self.savings_percentage:.1f}%)",
            "",
            "APPLIANCE SCHEDULES:",
        ]

        for schedule in self.schedules:
            lines.append(f"  {schedule.appliance_id}:")
            lines.append(f"    Run Time: {schedule.start_time} - {schedule.end_time}")
            lines.append(f"    Cost: {schedule.estimated_cost_eur:.2f} EUR")

        lines.append("=" * 60)
        return "\n".join(lines)


@dataclass(frozen=True)
class PriceStats:
    """Summary statistics for a day's price curve (EUR/kWh).

    Attributes:
        min: Cheapest hourly price
        max: Most expensive hourly price
        average: Mean hourly price
        current: Price at the current hour
        percentile: Position of the current price in [min, max], 0-100
    """

    min: float
    max: float
    average: float
    current: float
    percentile: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "average": self.average,
            "current": self.current,
            "percentile": self.percentile,
        }


@dataclass
class OptimizationConfig:
    """Configuration for the schedule optimizer.

    Attributes:
        reservation_strategy: Which hours an assignment removes from later pools
        block_rounding: How fractional durations become block lengths
    """

    reservation_strategy: ReservationStrategy = ReservationStrategy.START_HOUR
    block_rounding: BlockRounding = BlockRounding.CEIL

    def __post_init__(self):
        """Accept plain strings for both strategies."""
        self.reservation_strategy = ReservationStrategy(self.reservation_strategy)
        self.block_rounding = BlockRounding(self.block_rounding)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reservation_strategy": self.reservation_strategy.value,
            "block_rounding": self.block_rounding.value,
        }
