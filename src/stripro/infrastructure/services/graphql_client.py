"""GraphQL client.

Posts ``{"query", "variables"}`` to ``settings.graphql_url`` through the
shared request pipeline.

- Queries are read-classed POSTs: cached by document + canonical variables
  and tagged with the document's root field names ("clients", "user").
- Mutations use the document text as the invalidation name, so a document
  containing ``createClient`` clears entries tagged "clients".
- A response whose payload carries ``errors`` raises
  ApiError(GRAPHQL_ERROR) from a response interceptor, before anything is
  cached.

Usage:
    gql = GraphQLClient()
    data = await gql.query("query { clients { id name } }")
    await gql.mutate(
        "mutation($input: ClientInput!) { createClient(input: $input) { id } }",
        {"input": {"name": "Acme"}},
    )
"""

import dataclasses
import re
from typing import Any

from pydantic import ValidationError

from stripro.core.clock import Clock
from stripro.core.config import Settings, get_settings
from stripro.core.enums import ErrorCode, ErrorKind, HttpMethod, RequestKind
from stripro.core.errors import ApiError
from stripro.domain.protocols import LoggerProtocol, TransportProtocol
from stripro.domain.value_objects import CacheConfig, RequestOptions
from stripro.infrastructure.api_client import ApiClient
from stripro.infrastructure.api_client.retry import Sleep
from stripro.infrastructure.cache import build_cache_key
from stripro.schemas import Envelope
from stripro.schemas.graphql_schemas import GraphQLPayload, GraphQLRequest

_TOKEN = re.compile(r'"(?:\\.|[^"\\])*"|\.\.\.|[{}():@]|[_A-Za-z][_0-9A-Za-z]*')
_COMMENT = re.compile(r"#[^\n]*")


def root_fields(document: str) -> list[str]:
    """Top-level selection field names of the first operation.

    Aliases resolve to the underlying field (``a: clients`` gives "clients").
    Directives and fragment spreads are skipped.

    Example:
        >>> root_fields("query Q($id: ID!) { client(id: $id) { id } stats { total } }")
        ['client', 'stats']
    """
    tokens = _TOKEN.findall(_COMMENT.sub("", document))
    fields: list[str] = []
    depth = 0
    parens = 0
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token == "{":
            depth += 1
        elif token == "}":
            depth -= 1
            if depth == 0 and fields:
                break
        elif token == "(":
            parens += 1
        elif token == ")":
            parens -= 1
        elif depth == 1 and parens == 0:
            if token in ("@", "..."):
                i += 1
                if i < len(tokens) and tokens[i] == "on":
                    i += 1
            elif token[0] not in '":':
                if i + 2 < len(tokens) and tokens[i + 1] == ":":
                    i += 2
                    token = tokens[i]
                fields.append(token)
        i += 1
    return fields


class GraphQLClient(ApiClient):
    """GraphQL queries and mutations over the shared pipeline."""

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
        super().__init__(
            settings.graphql_url,
            transport=transport,
            logger=logger,
            settings=settings,
            clock=clock,
            sleep=sleep,
            log_traffic=log_traffic,
        )
        self.add_response_interceptor(self._raise_on_graphql_errors)

    async def query(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        *,
        cache: bool = True,
        ttl_seconds: int | None = None,
        options: RequestOptions | None = None,
    ) -> Any:
        """Run a query and return its ``data`` member.

        Args:
            document: GraphQL query document.
            variables: Query variables.
            cache: Cache the result (keyed by document and variables).
            ttl_seconds: Cache TTL; settings.cache_ttl_seconds when None.
            options: Extra call options (headers, retries, cancel token ...).

        Raises:
            ApiError: GRAPHQL_ERROR when the payload carries errors, or any
                pipeline error.
        """
        body = self._body(document, variables)
        options = options or RequestOptions()
        if cache and options.cache is None:
            fields = root_fields(document)
            options = dataclasses.replace(
                options,
                cache=CacheConfig(
                    ttl_seconds=ttl_seconds or self._settings.cache_ttl_seconds,
                    tags=frozenset(field.lower() for field in fields) or {"graphql"},
                    key=build_cache_key("graphql", body),
                ),
            )
        elif not cache:
            options = dataclasses.replace(options, cache=None)
        return await self.request(
            HttpMethod.POST, "", body, options, kind=RequestKind.READ
        )

    async def mutate(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        *,
        options: RequestOptions | None = None,
    ) -> Any:
        """Run a mutation and invalidate cached queries it affects.

        The document text is the invalidation name unless ``options``
        sets ``invalidates``.
        """
        options = options or RequestOptions()
        if options.invalidates is None:
            options = dataclasses.replace(options, cache=None, invalidates=document)
        return await self.request(
            HttpMethod.POST,
            "",
            self._body(document, variables),
            options,
            kind=RequestKind.MUTATION,
        )

    @staticmethod
    def _body(document: str, variables: dict[str, Any] | None) -> dict[str, Any]:
        return GraphQLRequest(query=document, variables=variables or {}).model_dump(
            by_alias=True, exclude_none=True
        )

    @staticmethod
    def _raise_on_graphql_errors(envelope: Envelope[Any]) -> Envelope[Any]:
        errors = (envelope.model_extra or {}).get("errors")
        if not errors:
            return envelope
        try:
            payload = GraphQLPayload.model_validate(
                {"data": envelope.data, "errors": errors}
            )
            messages = [item.message for item in payload.errors or []]
            details = [item.model_dump(exclude_none=True) for item in payload.errors or []]
        except ValidationError:
            messages = []
            details = errors
        raise ApiError(
            code=ErrorCode.GRAPHQL_ERROR,
            message=messages[0] if messages else "GraphQL request failed",
            kind=ErrorKind.CLIENT,
            details={"errors": details},
        )
