"""
API Package

FastAPI routers and dependencies for the Tarifa API.
"""
