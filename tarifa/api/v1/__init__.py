"""
API v1 Routers

Version 1 of the Tarifa API.
"""

from tarifa.api.v1.appliances import router as appliances_router
from tarifa.api.v1.optimization import router as optimization_router
from tarifa.api.v1.preferences import router as preferences_router
from tarifa.api.v1.prices import router as prices_router

__all__ = [
    "appliances_router",
    "optimization_router",
    "preferences_router",
    "prices_router",
]
