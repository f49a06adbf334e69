"""Application environment types.

Used by Settings and the logger factory to pick environment-specific
behavior (JSON logs for testing/CI, console renderer for development).
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
