"""
Tarifa - Hourly Electricity Price Planner

Shows the day's hourly PVPC electricity prices and schedules household
appliances into the cheapest hours.

Packages:
- optimization: Appliance scheduling optimizer (pure, no I/O)
- integrations: REE market-data price feed with caching
- repositories: Key-value persistence for appliances and preferences
- services / api: FastAPI application exposing the above
"""

__version__ = "1.0.0"
