"""Domain layer: protocols (ports), value objects and domain errors.

Nothing in this package depends on httpx, structlog or any other adapter.
"""
