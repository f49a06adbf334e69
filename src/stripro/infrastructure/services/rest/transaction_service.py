"""Transaction resource service (REST)."""

from typing import Any

from stripro.core.enums import HttpMethod, RequestKind
from stripro.infrastructure.services.rest.base import RestService


class TransactionService(RestService):
    """Transaction CRUD, refunds, analytics and export."""

    resource = "transactions"

    async def list_transactions(self, params: dict[str, Any] | None = None) -> Any:
        return await self.get(
            f"/transactions{self.build_query_string(params)}", self._cached()
        )

    async def get_transaction(self, transaction_id: str) -> Any:
        return await self.get(f"/transactions/{transaction_id}", self._cached())

    async def create_transaction(self, payload: dict[str, Any]) -> Any:
        return await self.post("/transactions", payload)

    async def update_transaction(
        self, transaction_id: str, payload: dict[str, Any]
    ) -> Any:
        return await self.put(f"/transactions/{transaction_id}", payload)

    async def cancel_transaction(self, transaction_id: str) -> Any:
        return await self.post(f"/transactions/{transaction_id}/cancel")

    async def refund_transaction(
        self,
        transaction_id: str,
        amount: float | None = None,
        reason: str | None = None,
    ) -> Any:
        """Refund fully, or partially when ``amount`` is given."""
        body = {
            key: value
            for key, value in {"amount": amount, "reason": reason}.items()
            if value is not None
        }
        return await self.post(f"/transactions/{transaction_id}/refund", body)

    async def get_transaction_analytics(
        self, period: str = "month", filters: dict[str, Any] | None = None
    ) -> Any:
        query = self.build_query_string({"period": period, **(filters or {})})
        return await self.get(f"/transactions/analytics{query}", self._cached())

    async def bulk_process_transactions(self, operations: list[dict[str, Any]]) -> Any:
        """Run ``[{"id": ..., "action": "cancel"|"refund", ...}, ...]`` in one call."""
        return await self.post(
            "/transactions/bulk", {"operations": operations}, self._rate_limited()
        )

    async def export_transactions(
        self, format: str = "csv", filters: dict[str, Any] | None = None
    ) -> str:
        """Request an export (csv, excel or pdf) and return its download URL."""
        result = await self.request(
            HttpMethod.POST,
            "/transactions/export",
            {"format": format, "filters": filters or {}},
            self._rate_limited(),
            kind=RequestKind.READ,
        )
        return result["downloadUrl"]
