"""
Tarifa Test Suite

Test Categories:
- test_price_stats, test_optimization, test_validation, test_timeline - scheduling core
- test_integrations - REE client, price cache, pricing service
- test_repositories - key-value stores and repositories
- test_api - HTTP endpoints
"""
