"""Core errors package.

Usage:
    from stripro.core.errors import ApiError, DomainError
"""

from stripro.core.errors.api_error import ApiError
from stripro.core.errors.domain_error import DomainError

__all__ = ["ApiError", "DomainError"]
