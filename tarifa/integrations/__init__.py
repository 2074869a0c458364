"""
External API Integrations

Pricing APIs:
- REE: Spanish PVPC hourly electricity prices
"""
