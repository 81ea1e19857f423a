"""FastAPI application for the people-count user directory.

Main entry point for the REST API managing users in MongoDB. Every route
sits behind the access gate (origin allow-list plus basic auth).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from pymongo.errors import PyMongoError

from peoplecount.config import get_settings
from peoplecount.errors import PeopleCountError
from peoplecount.routes import health, superuser, users
from peoplecount.security import access_gate
from peoplecount.services import database
from peoplecount.services.user_store import UserStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Application lifespan context manager for startup and shutdown events.

    Handles:
    - Startup: Create the MongoDB client, ensure indexes, build the store
    - Shutdown: Close MongoDB connection gracefully

    Args:
        fastapi_app: FastAPI application instance.

    Yields:
        Control back to FastAPI during application lifetime.
    """
    # Startup
    logger.info("Starting people-count user service...")

    settings = get_settings()

    try:
        client = database.create_client(settings)
        users_col = database.get_users_collection(client, settings)

        fastapi_app.state.mongo_client = client
        fastapi_app.state.user_store = UserStore(users_col)

    except Exception as e:
        logger.error("Failed to initialise application: %s", e, exc_info=True)
        raise

    # Requests answer 500 until MongoDB is reachable
    try:
        database.ensure_indexes(users_col)
        logger.info("Database indexes verified")
    except PyMongoError as e:
        logger.warning("MongoDB unavailable at startup, indexes not verified: %s", e)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    try:
        database.close_client(fastapi_app.state.mongo_client)
    except Exception as e:
        logger.error("Error during shutdown: %s", e, exc_info=True)

    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="People Count Backend",
    description="User directory and password management for the people-count service",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(PeopleCountError)
async def people_count_error_handler(request: Request, exc: PeopleCountError):
    """Map domain errors to plain-text responses with their status code."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return PlainTextResponse(
        exc.message,
        status_code=exc.status_code,
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Answer malformed bodies (bad JSON, wrong field types) with a 400."""
    # Only locations are logged; the raw input may hold passwords
    logger.info(
        "Invalid payload for %s %s at %s",
        request.method,
        request.url.path,
        [error.get("loc") for error in exc.errors()],
    )
    return PlainTextResponse("Invalid payload", status_code=400)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions globally.

    Args:
        request: FastAPI request object.
        exc: Exception that was raised.

    Returns:
        Plain-text 500 response without internal details.
    """
    logger.error(
        "Unhandled exception for %s %s: %s",
        request.method,
        request.url,
        exc,
        exc_info=True,
    )

    return PlainTextResponse("Internal server error", status_code=500)


# Origin and basic-auth gate for every request, docs included
app.middleware("http")(access_gate)

# Register routers
app.include_router(health.router)
app.include_router(users.router)
app.include_router(superuser.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().server.port)
