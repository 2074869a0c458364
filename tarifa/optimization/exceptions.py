"""
Exceptions raised by the appliance scheduling optimizer.

Internal edge cases (exhausted hours, no restriction-satisfying hour, a flat
price curve) are resolved by fallback logic and never raised. Only malformed
caller input surfaces as an exception.
"""

from typing import List, Optional


class OptimizationError(Exception):
    """Base exception for optimizer errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(OptimizationError):
    """Raised when the price curve is missing but work was requested"""
    pass


class ValidationError(OptimizationError):
    """Raised by the appliance validator when a record is malformed.

    Attributes:
        errors: Every problem found, in the order they were checked
    """

    def __init__(self, errors: List[str], message: Optional[str] = None):
        super().__init__(message or "; ".join(errors))
        self.errors = list(errors)
