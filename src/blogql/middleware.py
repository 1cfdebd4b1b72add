"""
Per-request log context for the HTTP app.
"""

import json
import re
import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .logging import clear_request_context, get_logger, set_request_context

logger = get_logger(__name__)

GRAPHQL_PATH = "/graphql"
REDACTED = "[REDACTED]"
SENSITIVE_KEYS = ("password", "token", "secret", "authorization", "cookie", "session")
# GraphQL documents and variables sent over GET can carry passwords (login)
GRAPHQL_PAYLOAD_KEYS = ("query", "variables", "extensions")

_OPERATION_RE = re.compile(r"\b(query|mutation)\s+(\w+)")


def sanitize_query_params(params: dict[str, Any], graphql: bool = False) -> dict[str, Any]:
    """Return ``params`` with credential-like values (and GraphQL payloads) redacted."""

    def is_sensitive(key: str) -> bool:
        lowered = key.lower()
        if graphql and lowered in GRAPHQL_PAYLOAD_KEYS:
            return True
        return any(word in lowered for word in SENSITIVE_KEYS)

    return {key: REDACTED if is_sensitive(key) else value for key, value in params.items()}


def operation_name_from_query(query: str) -> str | None:
    """Name a GraphQL document for logs: ``Name``, ``mutation:Name`` or a placeholder."""
    if not query:
        return None
    if "__schema" in query or "IntrospectionQuery" in query:
        return "__introspection"

    match = _OPERATION_RE.search(query)
    if not match:
        return "unnamed_operation"
    kind, name = match.groups()
    return f"mutation:{name}" if kind == "mutation" else name


async def graphql_operation_name(request: Request) -> str | None:
    if request.url.path != GRAPHQL_PATH:
        return None

    if request.method == "GET":
        payload: Any = dict(request.query_params)
    elif request.method == "POST":
        try:
            payload = json.loads(await request.body() or b"{}")
        except ValueError:
            return None
    else:
        return None

    if not isinstance(payload, dict):
        return None
    name = payload.get("operationName")
    if isinstance(name, str) and name:
        return name
    query = payload.get("query")
    return operation_name_from_query(query) if isinstance(query, str) else None


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Give every request an id, log its start and outcome, and echo the id back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = set_request_context()
        started = time.perf_counter()
        fields = {
            "method": request.method,
            "path": request.url.path,
            "graphql_operation": await graphql_operation_name(request),
        }
        logger.info(
            "Request started",
            query_params=sanitize_query_params(
                dict(request.query_params), graphql=request.url.path == GRAPHQL_PATH
            )
            or None,
            remote_addr=request.client.host if request.client else None,
            **fields,
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Request failed", **fields)
            raise
        else:
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                **fields,
            )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()
