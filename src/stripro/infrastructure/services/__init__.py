"""Services built on the API client runtime.

- rest: resource services bound to the REST API (clients, transactions, users)
- graphql_client: GraphQL queries and mutations
- mcp_service: tool invocation on the MCP server (Stripe tools)
"""
