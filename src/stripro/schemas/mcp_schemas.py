"""MCP tool server schemas.

Reference:
    - stripro.infrastructure.services.mcp_service
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolContent(BaseModel):
    """One content block of a tool result."""

    type: str = Field(..., description="Content type (usually 'text')")
    text: str = Field("", description="Content text (JSON for Stripe tools)")


class ToolResponse(BaseModel):
    """Result of executing a tool."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[ToolContent] = Field(default_factory=list)
    is_error: bool = Field(False, alias="isError")

    @property
    def first_text(self) -> str | None:
        return self.content[0].text if self.content else None


class ConnectionStatus(BaseModel):
    """Outcome of MCPService.test_connection()."""

    connected: bool
    error: str | None = None
    server_info: Any = None


class RefreshStatus(BaseModel):
    """Outcome of MCPService.refresh_stripe_data()."""

    success: bool
    message: str | None = None
