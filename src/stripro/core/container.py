"""Composition root.

Application-scoped singletons for the API client runtime:
- Logging (structlog console adapter)
- Service factories (REST, GraphQL, MCP) wired with settings and logger

Usage:
    from stripro.core.container import get_client_service

    clients = get_client_service()
    page = await clients.list_clients({"page": 1})
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from stripro.core.config import get_settings

if TYPE_CHECKING:
    from stripro.domain.protocols.logger_protocol import LoggerProtocol
    from stripro.infrastructure.services.graphql_client import GraphQLClient
    from stripro.infrastructure.services.mcp_service import MCPService
    from stripro.infrastructure.services.rest import (
        ClientService,
        TransactionService,
        UserService,
    )


# ============================================================================
# Logging (Application-Scoped)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here:
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    The returned logger is bound with the application name and version.

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from stripro.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    adapter = ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
    )
    return adapter.bind(app=settings.app_name, version=settings.app_version)


# ============================================================================
# Services (Application-Scoped)
# ============================================================================


@lru_cache()
def get_client_service() -> "ClientService":
    """Return the shared REST client-resource service."""
    from stripro.infrastructure.services.rest import ClientService

    return ClientService(settings=get_settings(), logger=get_logger())


@lru_cache()
def get_transaction_service() -> "TransactionService":
    """Return the shared REST transaction service."""
    from stripro.infrastructure.services.rest import TransactionService

    return TransactionService(settings=get_settings(), logger=get_logger())


@lru_cache()
def get_user_service() -> "UserService":
    """Return the shared REST user service."""
    from stripro.infrastructure.services.rest import UserService

    return UserService(settings=get_settings(), logger=get_logger())


@lru_cache()
def get_graphql_client() -> "GraphQLClient":
    """Return the shared GraphQL client."""
    from stripro.infrastructure.services.graphql_client import GraphQLClient

    return GraphQLClient(settings=get_settings(), logger=get_logger())


@lru_cache()
def get_mcp_service() -> "MCPService":
    """Return the shared MCP tool service."""
    from stripro.infrastructure.services.mcp_service import MCPService

    return MCPService(settings=get_settings(), logger=get_logger())
