"""Core enums package.

Exports all core-level enums for convenient importing.

Usage:
    from stripro.core.enums import ErrorCode, ErrorKind, HttpMethod
"""

from stripro.core.enums.environment import Environment
from stripro.core.enums.error_code import ErrorCode, ErrorKind
from stripro.core.enums.http_method import HttpMethod, RequestKind

__all__ = ["Environment", "ErrorCode", "ErrorKind", "HttpMethod", "RequestKind"]
