"""MCP tool server service.

Executes tools on the MCP server (usually exposed through an ngrok tunnel)
and wraps the Stripe tools it offers.

Interceptors installed on top of the defaults:
    - request: ``ngrok-skip-browser-warning: true`` and the dashboard
      User-Agent on every call
    - error: messages mentioning ngrok are rewritten into an actionable
      "tunnel not accessible" message (original kept in details)

Health helpers (test_connection, get_available_tools, get_server_info,
refresh_stripe_data) report failures as values instead of raising; every
other method raises ApiError.
"""

import json
from typing import Any

from pydantic import ValidationError

from stripro.core.clock import Clock
from stripro.core.config import Settings, get_settings
from stripro.core.constants import USER_AGENT
from stripro.core.enums import ErrorCode, ErrorKind
from stripro.core.errors import ApiError
from stripro.domain.protocols import LoggerProtocol, TransportProtocol
from stripro.domain.value_objects import RequestConfig
from stripro.infrastructure.api_client import ApiClient
from stripro.infrastructure.api_client.retry import Sleep
from stripro.schemas.mcp_schemas import ConnectionStatus, RefreshStatus, ToolResponse

NGROK_UNREACHABLE_MESSAGE = (
    "MCP server (ngrok tunnel) is not accessible. "
    "Please check if the tunnel is active."
)


class MCPService(ApiClient):
    """Client for the MCP tool server."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transport: TransportProtocol | None = None,
        logger: LoggerProtocol | None = None,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
        log_traffic: bool = True,
    ) -> None:
        settings = settings or get_settings()
        if logger is None:
            from stripro.core.container import get_logger

            logger = get_logger()
        super().__init__(
            settings.mcp_base_url,
            transport=transport,
            logger=logger.bind(service="mcp"),
            settings=settings,
            clock=clock,
            sleep=sleep,
            log_traffic=log_traffic,
        )
        self.add_request_interceptor(self._add_tunnel_headers)
        self.add_error_interceptor(self._explain_tunnel_errors)

    @property
    def server_url(self) -> str:
        return self.base_url

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    async def execute_tool(self, name: str, arguments: dict[str, Any]) -> ToolResponse:
        """Execute a tool by name.

        Args:
            name: Tool name ("stripe/customer").
            arguments: Tool arguments.

        Returns:
            ToolResponse: Tool content blocks and error flag.
        """
        self._logger.info("mcp_tool_executing", tool=name)
        data = await self.post("/v1/tools/execute", {"name": name, "arguments": arguments})
        try:
            return ToolResponse.model_validate(data)
        except ValidationError as e:
            raise ApiError(
                code=ErrorCode.INVALID_RESPONSE,
                message=f"Malformed result from tool {name}",
                kind=ErrorKind.INVALID_RESPONSE,
                details={"tool": name},
                path=f"{self.base_url}/v1/tools/execute",
            ) from e

    async def create_stripe_customer(self, customer: dict[str, Any]) -> Any:
        return await self.post("/v1/tools/stripe/customer", customer)

    async def create_stripe_charge(self, charge: dict[str, Any]) -> Any:
        return await self.post("/v1/tools/stripe/charge", charge)

    async def create_stripe_payment_intent(self, payment: dict[str, Any]) -> Any:
        return await self.post("/v1/tools/stripe/payment-intent", payment)

    async def get_stripe_customer(self, customer_id: str) -> Any:
        """Fetch a Stripe customer through the ``stripe/customer`` tool.

        Raises:
            ApiError: TOOL_EXECUTION_FAILED when the tool reports an error.
        """
        response = await self.execute_tool(
            "stripe/customer", {"customer_id": customer_id}
        )
        if response.is_error:
            raise ApiError(
                code=ErrorCode.TOOL_EXECUTION_FAILED,
                message=response.first_text or "Failed to get customer",
                kind=ErrorKind.INTERNAL,
                details={"tool": "stripe/customer"},
                path=f"{self.base_url}/v1/tools/execute",
            )
        return json.loads(response.first_text or "{}")

    async def list_stripe_charges(self, params: dict[str, Any] | None = None) -> Any:
        """List charges; ``params`` may hold limit, customer and created[gte|lte]."""
        return await self.get(f"/v1/tools/stripe/charges{self.build_query_string(params)}")

    async def list_stripe_customers(self, params: dict[str, Any] | None = None) -> Any:
        return await self.get(
            f"/v1/tools/stripe/customers{self.build_query_string(params)}"
        )

    async def get_stripe_balance(self) -> Any:
        return await self.get("/v1/tools/stripe/balance")

    async def get_stripe_account(self) -> Any:
        return await self.get("/v1/tools/stripe/account")

    # -------------------------------------------------------------------------
    # Health helpers (failures reported as values)
    # -------------------------------------------------------------------------

    async def get_server_info(self) -> Any:
        """Server info, or None when the server cannot be reached."""
        try:
            return await self.get("/v1/info")
        except ApiError as e:
            self._logger.warning("mcp_server_info_failed", code=e.code, message=e.message)
            return None

    async def test_connection(self) -> ConnectionStatus:
        self._logger.info("mcp_connection_testing", server_url=self.server_url)
        try:
            info = await self.get("/health")
        except ApiError as e:
            self._logger.warning("mcp_connection_failed", code=e.code, message=e.message)
            return ConnectionStatus(connected=False, error=e.message)
        return ConnectionStatus(connected=True, server_info=info)

    async def get_available_tools(self) -> list[str]:
        """Tool names offered by the server; empty when unavailable."""
        try:
            data = await self.get("/v1/tools")
        except ApiError as e:
            self._logger.warning("mcp_tools_unavailable", code=e.code, message=e.message)
            return []
        if not isinstance(data, dict):
            return []
        return list(data.get("tools") or [])

    async def refresh_stripe_data(self) -> RefreshStatus:
        try:
            await self.post("/v1/tools/stripe/refresh", {})
        except ApiError as e:
            self._logger.warning("mcp_refresh_failed", code=e.code, message=e.message)
            return RefreshStatus(success=False, message=e.message)
        return RefreshStatus(success=True, message="Stripe data refreshed successfully")

    # -------------------------------------------------------------------------
    # Interceptors
    # -------------------------------------------------------------------------

    @staticmethod
    def _add_tunnel_headers(config: RequestConfig) -> RequestConfig:
        return config.with_header("ngrok-skip-browser-warning", "true").with_header(
            "User-Agent", USER_AGENT
        )

    @staticmethod
    def _explain_tunnel_errors(error: ApiError) -> ApiError:
        if "ngrok" not in error.message.lower():
            return error
        return error.with_updates(
            message=NGROK_UNREACHABLE_MESSAGE,
            details={**(error.details or {}), "originalMessage": error.message},
        )
