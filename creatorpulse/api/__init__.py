"""HTTP API: routers, request/response schemas, and request-scoped dependencies."""
