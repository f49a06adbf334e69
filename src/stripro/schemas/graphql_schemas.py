"""GraphQL request/response payloads carried inside the envelope."""

from typing import Any

from pydantic import BaseModel, Field


class GraphQLRequest(BaseModel):
    """Body posted to the GraphQL endpoint."""

    query: str = Field(..., description="GraphQL document")
    variables: dict[str, Any] = Field(default_factory=dict)
    operation_name: str | None = Field(None, serialization_alias="operationName")


class GraphQLErrorItem(BaseModel):
    """One entry of a GraphQL ``errors`` array."""

    message: str
    path: list[str | int] | None = None
    extensions: dict[str, Any] | None = None


class GraphQLPayload(BaseModel):
    """GraphQL result: ``data`` and/or ``errors``."""

    data: dict[str, Any] | None = None
    errors: list[GraphQLErrorItem] | None = None
