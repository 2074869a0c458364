"""
Appliance Validation

Checks appliance records before they reach storage or the optimizer. The
optimizer itself never validates; it assumes well-formed input.
"""

import re
from typing import List

from tarifa.optimization.appliance_models import Appliance
from tarifa.optimization.exceptions import ValidationError


MAX_POWER_WATTS = 10000
MAX_DURATION_HOURS = 24

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


def is_time_valid(value: str) -> bool:
    """Check an "HH:MM" string (single-digit hours allowed)."""
    return isinstance(value, str) and bool(TIME_PATTERN.match(value))


def validate_appliance(appliance: Appliance) -> List[str]:
    """Collect every problem with an appliance record.

    Args:
        appliance: Appliance to check

    Returns:
        Error messages; empty if the appliance is valid
    """
    errors: List[str] = []

    if not appliance.name or not appliance.name.strip():
        errors.append("Name is required")

    if appliance.power_watts <= 0:
        errors.append("Power must be greater than 0")
    if appliance.power_watts > MAX_POWER_WATTS:
        errors.append(f"Power cannot exceed {MAX_POWER_WATTS:,}W")

    if appliance.duration_hours <= 0:
        errors.append("Duration must be greater than 0")
    if appliance.duration_hours > MAX_DURATION_HOURS:
        errors.append(f"Duration cannot exceed {MAX_DURATION_HOURS} hours")

    for restriction in appliance.restrictions:
        if not is_time_valid(restriction.start) or not is_time_valid(restriction.end):
            errors.append(
                f"Invalid time format in restriction "
                f"{restriction.start!r}-{restriction.end!r} (expected HH:MM)"
            )

    return errors


def validate_appliance_or_raise(appliance: Appliance) -> Appliance:
    """Validate an appliance and return it unchanged.

    Raises:
        ValidationError: With every problem found
    """
    errors = validate_appliance(appliance)
    if errors:
        raise ValidationError(errors)
    return appliance
