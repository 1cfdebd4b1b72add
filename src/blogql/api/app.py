"""
Main FastAPI application for the blogql backend
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..auth.credentials import CredentialService
from ..config import settings
from ..database.connection import check_database_connection, dispose_database, init_database
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..storage import ImageStore

configure_logging(debug=settings.debug, level=settings.log_level)
logger = get_logger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the application cannot be started with the current settings."""

    pass


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting blogql API...")
    init_database()

    success, error_message = await check_database_connection()
    if success:
        logger.info("Database connection validation successful")
    else:
        logger.error("Database connection validation failed", error=error_message)
        if settings.environment.lower() in ("production", "prod"):
            raise ConfigurationError("Database is not reachable")

    yield

    logger.info("Shutting down blogql API...")
    await dispose_database()


def create_credential_service() -> CredentialService:
    """Build the credential service from settings; the JWT secret must be configured."""
    if not settings.jwt_secret:
        raise ConfigurationError("BLOGQL_JWT_SECRET must be set to sign authentication tokens")

    return CredentialService(
        secret_key=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        token_expiry_seconds=settings.token_expiry_seconds,
        hash_rounds=settings.password_hash_rounds,
    )


def create_app(
    credentials: CredentialService | None = None,
    images: ImageStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    credentials = credentials or create_credential_service()
    images = images or ImageStore(Path(settings.images_dir))

    app = FastAPI(
        title="blogql API",
        description="GraphQL API for a small blogging application",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    from ..graphql.schema import create_graphql_router, validate_schema

    logger.info("Validating GraphQL schema...")
    validate_schema()

    graphql_router = create_graphql_router(credentials, images, graphiql=settings.debug)
    app.include_router(graphql_router, prefix="")
    logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "blogql.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
