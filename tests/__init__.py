"""
Test suite for the Banana Marketplace backend.

Test Organization:
- conftest.py - shared account, farm, product and order fixtures
- integration/ - service and API integration tests, one module per component
"""
