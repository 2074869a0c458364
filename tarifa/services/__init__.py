"""
Service Layer

Business logic for the Tarifa API.
"""

from tarifa.services.planner_service import PlannerService

__all__ = ["PlannerService"]
