"""API client runtime.

Usage:
    from stripro.infrastructure.api_client import ApiClient, CancellationToken
"""

from stripro.core.cancellation import CancellationToken
from stripro.infrastructure.api_client.client import ApiClient
from stripro.infrastructure.api_client.interceptors import (
    ErrorInterceptor,
    InterceptorPipeline,
    RequestInterceptor,
    ResponseInterceptor,
)
from stripro.infrastructure.api_client.query_string import build_query_string
from stripro.infrastructure.api_client.retry import RetryExecutor

__all__ = [
    "ApiClient",
    "CancellationToken",
    "ErrorInterceptor",
    "InterceptorPipeline",
    "RequestInterceptor",
    "ResponseInterceptor",
    "RetryExecutor",
    "build_query_string",
]
