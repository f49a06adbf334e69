"""Core shared kernel.

This module provides foundational utilities used across all layers:
- Result types for railway-oriented programming
- Error classes (DomainError data errors, ApiError raised to callers)
- Settings and constants
- Composition root (container)

The core module has NO dependencies on infrastructure adapters.
"""
