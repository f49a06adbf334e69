"""REST resource services.

Usage:
    from stripro.infrastructure.services.rest import ClientService

    async with ClientService() as clients:
        page = await clients.list_clients({"page": 1, "limit": 50})
"""

from stripro.infrastructure.services.rest.base import RestService
from stripro.infrastructure.services.rest.client_service import ClientService
from stripro.infrastructure.services.rest.transaction_service import (
    TransactionService,
)
from stripro.infrastructure.services.rest.user_service import UserService

__all__ = ["ClientService", "RestService", "TransactionService", "UserService"]
