"""
Main GraphQL schema definition using Strawberry
"""

from typing import Any

import strawberry
from fastapi import Request
from graphql import validate_schema as gql_validate_schema
from strawberry.fastapi import GraphQLRouter

from ..auth.credentials import CredentialService
from ..auth.middleware import get_auth_context
from ..logging import bind_user_id, get_logger
from ..storage import ImageStore
from .mutations.root import Mutation
from .queries.root import Query

logger = get_logger(__name__)

# Create the GraphQL schema
schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
)


def validate_schema() -> None:
    """Fail at startup when the schema has unresolved or inconsistent types."""
    errors = gql_validate_schema(schema._schema)
    if errors:
        message = "; ".join(error.message for error in errors)
        logger.error("GraphQL schema validation failed", errors=message)
        raise RuntimeError(f"GraphQL schema is invalid: {message}")

    logger.info("GraphQL schema validated", types=len(schema._schema.type_map))


def build_context(
    authorization: str | None, credentials: CredentialService, images: ImageStore
) -> dict[str, Any]:
    """Build the resolver context for one request."""
    auth_context = get_auth_context(authorization, credentials)
    bind_user_id(str(auth_context.user_id) if auth_context.user_id else None)
    return {
        "auth": auth_context,
        "credentials": credentials,
        "images": images,
    }


def create_graphql_router(
    credentials: CredentialService, images: ImageStore, graphiql: bool = True
) -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI."""

    async def get_context(request: Request) -> dict[str, Any]:
        """Get the context for GraphQL resolvers."""
        context = build_context(request.headers.get("authorization"), credentials, images)
        context["request"] = request
        return context

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if graphiql else None,
        context_getter=get_context,
    )
