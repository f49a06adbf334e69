"""Client resource service (REST).

Endpoints:
    GET    /clients                 list (cached, tag "clients")
    GET    /clients/{id}            detail (cached)
    POST   /clients                 create
    PUT    /clients/{id}            update
    DELETE /clients/{id}            delete
    GET    /clients/{id}/analytics  analytics for a period (cached)
    POST   /clients/search          search (read, not cached)
    POST   /clients/bulk            bulk update (rate limited)
    GET    /dashboard/stats         dashboard totals (cached, tags clients+transactions)
"""

from typing import Any

from stripro.core.enums import HttpMethod, RequestKind
from stripro.infrastructure.services.rest.base import RestService


class ClientService(RestService):
    """Client CRUD, analytics and dashboard statistics."""

    resource = "clients"

    async def list_clients(self, params: dict[str, Any] | None = None) -> Any:
        """List clients with pagination/filter params."""
        return await self.get(
            f"/clients{self.build_query_string(params)}", self._cached()
        )

    async def get_client(self, client_id: str) -> Any:
        return await self.get(f"/clients/{client_id}", self._cached())

    async def create_client(self, payload: dict[str, Any]) -> Any:
        return await self.post("/clients", payload)

    async def update_client(self, client_id: str, payload: dict[str, Any]) -> Any:
        return await self.put(f"/clients/{client_id}", payload)

    async def delete_client(self, client_id: str) -> None:
        await self.delete(f"/clients/{client_id}")

    async def get_client_analytics(self, client_id: str, period: str = "month") -> Any:
        """Revenue/fee analytics for one client over week, month, quarter or year."""
        query = self.build_query_string({"period": period})
        return await self.get(f"/clients/{client_id}/analytics{query}", self._cached())

    async def search_clients(self, query: str, limit: int = 10) -> Any:
        """Full-text client search. A read: it never invalidates the cache."""
        return await self.request(
            HttpMethod.POST,
            "/clients/search",
            {"query": query, "limit": limit},
            kind=RequestKind.READ,
        )

    async def bulk_update_clients(self, updates: list[dict[str, Any]]) -> Any:
        """Apply ``[{"id": ..., "data": {...}}, ...]`` in one call."""
        return await self.post(
            "/clients/bulk", {"updates": updates}, self._rate_limited()
        )

    async def get_dashboard_stats(self, period: str = "month") -> Any:
        """Dashboard totals; invalidated by client and transaction mutations."""
        query = self.build_query_string({"period": period})
        return await self.get(
            f"/dashboard/stats{query}",
            self._cached(tags={"clients", "transactions"}),
        )
