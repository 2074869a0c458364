"""
Tests for Greedy Appliance Scheduling Optimization

Test coverage includes:
- Appliance and price model behaviour
- Restriction filtering and consecutive block search
- Cost functions and the worst-price baseline
- Priority-ordered greedy allocation and its fallbacks
- Engine totals and savings accounting
"""

import random

import pytest

from tarifa.optimization.appliance_models import (
    Appliance,
    BlockRounding,
    HourlyPriceRecord,
    OptimizationConfig,
    OptimizedSchedule,
    Priority,
    ReservationStrategy,
    RestrictionKind,
    TimeRestriction,
    build_price_curve,
    convert_kwh_to_mwh,
    convert_mwh_to_kwh,
    format_hour,
    parse_hour,
)
from tarifa.optimization.constraints import (
    filter_usable,
    find_consecutive_block,
    is_hour_in_window,
    is_hour_usable,
)
from tarifa.optimization.engine import OptimizationEngine, optimize_appliances
from tarifa.optimization.exceptions import InvalidInputError
from tarifa.optimization.objective import (
    calculate_baseline_cost,
    calculate_block_cost,
    calculate_single_hour_cost,
    hour_weights,
)
from tarifa.optimization.price_stats import sort_by_price
from tarifa.optimization.scheduler import ScheduleOptimizer, order_by_priority


# =============================================================================
# Models
# =============================================================================


class TestModels:
    """Test suite for data models."""

    def test_parse_and_format_hour(self):
        """Test HH:MM conversion truncates minutes and wraps past midnight."""
        assert parse_hour("07:45") == 7
        assert format_hour(3) == "03:00"
        assert format_hour(3.5) == "03:30"
        assert format_hour(25) == "01:00"

    def test_price_conversions(self):
        """Test MWh/kWh conversions and their rounding."""
        assert convert_mwh_to_kwh(123.4567891) == 0.123457
        assert convert_kwh_to_mwh(0.1234567) == 123.46

    def test_appliance_energy(self, make_appliance):
        """Test energy calculation in kWh."""
        appliance = make_appliance(power_watts=2000, duration_hours=1.5)
        assert appliance.power_kw == 2.0
        assert appliance.energy_kwh == 3.0

    def test_appliance_serialization(self, make_appliance, night_forbidden):
        """Test round-trip through dictionaries keeps restrictions."""
        appliance = make_appliance(priority=Priority.HIGH, restrictions=[night_forbidden])
        restored = Appliance.from_dict(appliance.to_dict())

        assert restored == appliance
        assert restored.restrictions[0].kind is RestrictionKind.FORBIDDEN

    def test_restriction_accepts_type_key(self):
        """Test records using 'type' for the restriction kind."""
        restriction = TimeRestriction.from_dict({"start": "08:00", "end": "10:00", "type": "preferred"})
        assert restriction.kind is RestrictionKind.PREFERRED

    def test_price_record_hour_range(self):
        """Test hours outside 0-23 are rejected."""
        with pytest.raises(ValueError, match="Hour must be 0-23"):
            HourlyPriceRecord(hour=24, price_per_kwh=0.1)

    def test_price_record_derives_mwh(self):
        record = HourlyPriceRecord(hour=0, price_per_kwh=0.1234)
        assert record.price_raw_per_mwh == 123.4

    def test_covered_hours_wrap(self):
        """Test a run crossing midnight covers hours on both sides."""
        schedule = OptimizedSchedule(
            appliance_id="a",
            start_time="23:00",
            end_time="01:30",
            duration_hours=2.5,
            estimated_cost_eur=0.0,
            average_price_per_kwh=0.0,
        )
        assert schedule.covered_hours() == [23, 0, 1]

    def test_config_accepts_strings(self):
        config = OptimizationConfig(reservation_strategy="full_span", block_rounding="truncate")
        assert config.reservation_strategy is ReservationStrategy.FULL_SPAN
        assert config.block_rounding is BlockRounding.TRUNCATE

    def test_block_length(self):
        assert BlockRounding.CEIL.block_length(1.5) == 2
        assert BlockRounding.CEIL.block_length(2.0) == 2
        assert BlockRounding.TRUNCATE.block_length(1.5) == 1


# =============================================================================
# Constraints
# =============================================================================


class TestConstraints:
    """Test suite for restriction filtering and block search."""

    def test_window_is_half_open(self):
        assert is_hour_in_window(8, 8, 10)
        assert is_hour_in_window(9, 8, 10)
        assert not is_hour_in_window(10, 8, 10)

    def test_window_wraps_midnight(self):
        assert is_hour_in_window(23, 22, 8)
        assert is_hour_in_window(0, 22, 8)
        assert is_hour_in_window(7, 22, 8)
        assert not is_hour_in_window(8, 22, 8)
        assert not is_hour_in_window(21, 22, 8)

    def test_empty_window(self):
        """Test start == end covers no hour."""
        assert not any(is_hour_in_window(h, 5, 5) for h in range(24))

    def test_preferred_windows_do_not_block(self):
        preferred = TimeRestriction(start="00:00", end="12:00", kind=RestrictionKind.PREFERRED)
        assert is_hour_usable(3, [preferred])

    def test_filter_usable_keeps_order(self, typical_prices, night_forbidden):
        usable = filter_usable(typical_prices, [night_forbidden])
        assert [p.hour for p in usable] == list(range(8, 22))

    def test_consecutive_block_lowest_start(self):
        """Test the block with the lowest starting hour wins, not the cheapest."""
        prices = build_price_curve([0.1] * 24)
        candidates = [prices[h] for h in (10, 11, 2, 3)]

        block = find_consecutive_block(candidates, 2)
        assert [p.hour for p in block] == [2, 3]

    def test_consecutive_block_none(self, typical_prices):
        candidates = [typical_prices[h] for h in (1, 3, 5)]
        assert find_consecutive_block(candidates, 2) == []

    def test_consecutive_block_invalid_length(self, typical_prices):
        assert find_consecutive_block(typical_prices[:3], 0) == []
        assert find_consecutive_block(typical_prices[:3], 4) == []

    def test_consecutive_block_no_wrap(self):
        """Test runs do not wrap from 23:00 to 00:00."""
        prices = build_price_curve([0.1] * 24)
        assert find_consecutive_block([prices[23], prices[0]], 2) == []


# =============================================================================
# Objective
# =============================================================================


class TestObjective:
    """Test suite for cost functions."""

    def test_single_hour_cost(self, make_appliance, typical_prices):
        appliance = make_appliance(power_watts=2000, duration_hours=2)
        cost = calculate_single_hour_cost(appliance, typical_prices[4])
        assert cost == pytest.approx(4.0 * 0.085)

    def test_hour_weights(self):
        assert hour_weights(2.5, 3) == [1.0, 1.0, 0.5]
        assert hour_weights(2.0, 2) == [1.0, 1.0]

    def test_block_cost_whole_hours(self, make_appliance, typical_prices):
        appliance = make_appliance(power_watts=1500, duration_hours=3)
        cost = calculate_block_cost(appliance, typical_prices[3:6])
        assert cost == pytest.approx(1.5 * (0.090 + 0.085 + 0.092))

    def test_block_cost_fractional_hour(self, make_appliance, typical_prices):
        """Test the last block hour is charged pro rata."""
        appliance = make_appliance(power_watts=1500, duration_hours=1.5)
        cost = calculate_block_cost(appliance, typical_prices[3:5])
        assert cost == pytest.approx(1.5 * (0.090 + 0.5 * 0.085))

    def test_short_block_uses_first_hour(self, make_appliance, typical_prices):
        """Test a block shorter than the run prices everything at its first hour."""
        appliance = make_appliance(power_watts=1500, duration_hours=1.5)
        cost = calculate_block_cost(appliance, typical_prices[4:5])
        assert cost == pytest.approx(2.25 * 0.085)

    def test_baseline_uses_worst_price(self, make_appliance, typical_prices):
        appliances = [
            make_appliance(id="a", power_watts=1000, duration_hours=2),
            make_appliance(id="b", power_watts=500, duration_hours=1),
        ]
        assert calculate_baseline_cost(appliances, typical_prices) == pytest.approx(2.5 * 0.240)

    def test_baseline_empty(self, make_appliance, typical_prices):
        assert calculate_baseline_cost([], typical_prices) == 0.0
        assert calculate_baseline_cost([make_appliance()], []) == 0.0


# =============================================================================
# Scheduler
# =============================================================================


class TestScheduler:
    """Test suite for the greedy allocator."""

    def test_priority_order_is_stable(self, make_appliance):
        appliances = [
            make_appliance(id="low", priority=Priority.LOW),
            make_appliance(id="med1", priority=Priority.MEDIUM),
            make_appliance(id="high", priority=Priority.HIGH),
            make_appliance(id="med2", priority=Priority.MEDIUM),
        ]
        assert [a.id for a in order_by_priority(appliances)] == ["high", "med1", "med2", "low"]

    def test_one_hour_takes_cheapest_hour(self, make_appliance, typical_prices):
        """Test an unrestricted one-hour appliance lands on the cheapest hour."""
        schedules = ScheduleOptimizer().schedule([make_appliance()], typical_prices)

        assert len(schedules) == 1
        assert schedules[0].start_time == "04:00"
        assert schedules[0].end_time == "05:00"
        assert schedules[0].estimated_cost_eur == pytest.approx(1.5 * 0.085)
        assert schedules[0].average_price_per_kwh == pytest.approx(0.085)

    def test_three_hours_take_cheapest_run(self, make_appliance, typical_prices):
        """Test a three-hour appliance starts at the cheapest consecutive run."""
        appliance = make_appliance(duration_hours=3)
        schedule = ScheduleOptimizer().schedule([appliance], typical_prices)[0]

        assert schedule.start_time == "03:00"
        assert schedule.end_time == "06:00"
        assert schedule.estimated_cost_eur == pytest.approx(1.5 * (0.090 + 0.085 + 0.092))

    def test_priority_contention(self, make_appliance, typical_prices):
        """Test the higher priority appliance wins the contested cheap hour."""
        appliances = [
            make_appliance(id="low", priority=Priority.LOW),
            make_appliance(id="high", priority=Priority.HIGH),
        ]
        schedules = ScheduleOptimizer().schedule(appliances, typical_prices)

        assert [s.appliance_id for s in schedules] == ["high", "low"]
        assert schedules[0].start_time == "04:00"
        assert schedules[1].start_time == "03:00"

    def test_forbidden_window_respected(self, make_appliance, typical_prices, night_forbidden):
        """Test the cheapest hour outside the forbidden window is chosen."""
        appliance = make_appliance(restrictions=[night_forbidden])
        schedule = ScheduleOptimizer().schedule([appliance], typical_prices)[0]

        assert schedule.start_time == "14:00"

    def test_restriction_exhaustion_fallback(self, make_appliance, typical_prices):
        """Test restrictions are ignored when they forbid every free hour."""
        appliance = make_appliance(
            duration_hours=2,
            restrictions=[
                TimeRestriction(start="00:00", end="12:00"),
                TimeRestriction(start="12:00", end="00:00"),
            ],
        )
        schedule = ScheduleOptimizer().schedule([appliance], typical_prices)[0]

        assert schedule.start_time == "04:00"
        # single-hour pricing for the whole run
        assert schedule.estimated_cost_eur == pytest.approx(3.0 * 0.085)

    def test_start_hour_reservation_allows_overlap(self, make_appliance, typical_prices):
        """Test start-hour reservation leaves the rest of a run available."""
        appliances = [
            make_appliance(id="a", duration_hours=2, priority=Priority.HIGH),
            make_appliance(id="b", duration_hours=2),
        ]
        schedules = ScheduleOptimizer().schedule(appliances, typical_prices)

        assert schedules[0].start_time == "03:00"
        assert schedules[1].start_time == "04:00"

    def test_full_span_reservation(self, make_appliance, typical_prices):
        """Test full-span reservation keeps runs from overlapping."""
        config = OptimizationConfig(reservation_strategy=ReservationStrategy.FULL_SPAN)
        appliances = [
            make_appliance(id="a", duration_hours=2, priority=Priority.HIGH),
            make_appliance(id="b", duration_hours=2),
        ]
        schedules = ScheduleOptimizer(config).schedule(appliances, typical_prices)

        assert schedules[0].start_time == "03:00"
        assert schedules[1].start_time == "01:00"
        assert not set(schedules[0].covered_hours()) & set(schedules[1].covered_hours())

    def test_fractional_duration_ceil(self, make_appliance, typical_prices):
        appliance = make_appliance(duration_hours=1.5)
        schedule = ScheduleOptimizer().schedule([appliance], typical_prices)[0]

        assert schedule.start_time == "03:00"
        assert schedule.end_time == "04:30"
        assert schedule.estimated_cost_eur == pytest.approx(1.5 * (0.090 + 0.5 * 0.085))

    def test_fractional_duration_truncate(self, make_appliance, typical_prices):
        config = OptimizationConfig(block_rounding=BlockRounding.TRUNCATE)
        appliance = make_appliance(duration_hours=1.5)
        schedule = ScheduleOptimizer(config).schedule([appliance], typical_prices)[0]

        assert schedule.start_time == "04:00"
        assert schedule.end_time == "05:30"
        assert schedule.estimated_cost_eur == pytest.approx(2.25 * 0.085)

    def test_all_hours_used(self, make_appliance, typical_prices):
        """Test appliances beyond the 24 available start hours are skipped."""
        appliances = [make_appliance(id=f"a{i}") for i in range(25)]
        schedules = ScheduleOptimizer().schedule(appliances, typical_prices)

        assert len(schedules) == 24
        assert len({s.start_hour for s in schedules}) == 24
        assert schedules[-1].appliance_id == "a23"

    def test_no_consecutive_block_uses_cheapest_hour(self, make_appliance):
        """Test fallback to a single hour when no block is free."""
        prices = build_price_curve([0.1, 0.5] * 12)
        appliance = make_appliance(duration_hours=2)
        used = {h for h in range(24) if h % 2 == 1}

        schedule = ScheduleOptimizer().find_best_slot(appliance, sort_by_price(prices), used)

        assert schedule.start_time == "00:00"
        assert schedule.estimated_cost_eur == pytest.approx(3.0 * 0.1)

    def test_flat_prices_pick_earliest_hour(self, make_appliance, flat_prices):
        schedule = ScheduleOptimizer().schedule([make_appliance()], flat_prices)[0]
        assert schedule.start_time == "00:00"

    def test_inputs_not_mutated(self, make_appliance, typical_prices):
        appliances = [make_appliance(id="b", priority=Priority.LOW), make_appliance(id="a")]
        prices_before = list(typical_prices)

        ScheduleOptimizer().schedule(appliances, typical_prices)

        assert [a.id for a in appliances] == ["b", "a"]
        assert typical_prices == prices_before


# =============================================================================
# Engine
# =============================================================================


class TestOptimizationEngine:
    """Test suite for the top-level optimize() entry point."""

    @pytest.fixture
    def household(self, make_appliance, night_forbidden):
        return [
            make_appliance(id="dishwasher", power_watts=1800, duration_hours=2, priority=Priority.HIGH),
            make_appliance(id="washer", name="Washing machine", power_watts=2000, duration_hours=1.5),
            make_appliance(
                id="dryer",
                name="Dryer",
                power_watts=2500,
                duration_hours=1,
                priority=Priority.LOW,
                restrictions=[night_forbidden],
            ),
        ]

    def test_savings_identity(self, household, typical_prices):
        """Test total savings equal baseline minus optimized exactly."""
        result = OptimizationEngine().optimize(household, typical_prices)

        assert result.total_savings_eur == result.baseline_cost_eur - result.optimized_cost_eur
        assert result.optimized_cost_eur == pytest.approx(
            sum(s.estimated_cost_eur for s in result.schedules)
        )
        assert result.savings_percentage == pytest.approx(
            result.total_savings_eur / result.baseline_cost_eur * 100
        )
        assert result.total_savings_eur > 0

    def test_idempotent(self, household, typical_prices):
        """Test identical inputs give identical results."""
        first = OptimizationEngine().optimize(household, typical_prices)
        second = OptimizationEngine().optimize(household, typical_prices)
        assert first.to_dict() == second.to_dict()

    def test_curve_order_does_not_matter(self, household, typical_prices):
        """Test a shuffled price curve gives the same plan as the ordered one."""
        shuffled = list(typical_prices)
        random.Random(42).shuffle(shuffled)
        assert [p.hour for p in shuffled] != list(range(24))

        ordered = OptimizationEngine().optimize(household, typical_prices)
        reordered = OptimizationEngine().optimize(household, shuffled)

        assert reordered.to_dict() == ordered.to_dict()

    def test_empty_appliances(self, typical_prices):
        result = OptimizationEngine().optimize([], typical_prices)

        assert result.schedules == []
        assert result.baseline_cost_eur == 0.0
        assert result.savings_percentage == 0.0

    def test_empty_prices_raise(self, household):
        with pytest.raises(InvalidInputError):
            OptimizationEngine().optimize(household, [])

    def test_flat_prices_no_savings(self, make_appliance, flat_prices):
        result = optimize_appliances([make_appliance(duration_hours=2)], flat_prices)

        assert result.total_savings_eur == pytest.approx(0.0)
        assert result.savings_percentage == pytest.approx(0.0)

    def test_zero_prices(self, make_appliance):
        """Test a zero baseline reports 0% savings."""
        result = optimize_appliances([make_appliance()], build_price_curve([0.0] * 24))
        assert result.savings_percentage == 0.0

    def test_schedule_lookup_and_summary(self, household, typical_prices):
        result = OptimizationEngine().optimize(household, typical_prices)

        assert result.schedule_for("dryer").start_time == "14:00"
        assert result.schedule_for("missing") is None
        assert "OPTIMIZATION RESULT SUMMARY" in result.summary()
