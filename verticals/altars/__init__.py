"""Altar configurator pricing vertical.

Prices made-to-order MDF altars from (thickness, height, width, paint,
extras, quantity):
- SQLAlchemy models over the storefront's rule tables
- Async repositories returning immutable snapshots
- Pure-function price resolution and discount tiers
- Quote calculator
- Cache-aside pricing service with namespace invalidation
- FastAPI router
"""
