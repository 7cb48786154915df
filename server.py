"""
Assistant-Lite Server - FastAPI Application

HTTP entry point for the local stub assistant.

Business logic is delegated to the executor module - this file only handles:
- API routing
- Error mapping
- Middleware configuration
- Health checks
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import config
from db.seed import create_tables
from db.session import engine
from executor.execute import AssistantLiteService, get_service
from registry.errors import (
    AssistantError,
    DependencyFailureError,
    NotFoundError,
    ThreadChannelMismatchError,
)
from registry.schemas import (
    AskInput,
    AskResult,
    HealthResponse,
    ThreadListInput,
    ThreadListResult,
    ThreadMessagesResult,
)

VERSION = "1.0.0"

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.server.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler for startup/shutdown events.

    Validates configuration and makes sure the schema exists on startup.
    """
    logger.info("Starting Assistant-Lite server...")

    warnings = config.validate()
    for warning in warnings:
        logger.warning(f"Config warning: {warning}")

    create_tables(engine)
    logger.info(f"Debug mode: {config.server.debug}")

    yield

    logger.info("Shutting down Assistant-Lite server...")
    engine.dispose()


app = FastAPI(
    title="Assistant-Lite",
    description="Deterministic local assistant over stored channel analytics",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if config.server.debug else None,
    redoc_url="/redoc" if config.server.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def error_status(error: AssistantError) -> int:
    """HTTP status for a typed assistant error."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ThreadChannelMismatchError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, DependencyFailureError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(AssistantError)
async def assistant_error_handler(request: Request, exc: AssistantError) -> JSONResponse:
    status_code = error_status(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


def get_assistant_service() -> AssistantLiteService:
    return get_service()


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns:
        HealthResponse with server status
    """
    return HealthResponse(status="healthy", version=VERSION, mode="local-stub")


@app.post("/assistant/ask", response_model=AskResult, tags=["Assistant"])
def ask(
    request: AskInput,
    service: AssistantLiteService = Depends(get_assistant_service),
) -> AskResult:
    """
    Answer a question about one channel and store the exchange.

    Raises:
        AssistantError: mapped to 404/409/500/502 by the exception handler
    """
    logger.info(
        f"Ask request: channel={request.channel_id}, "
        f"thread={request.thread_id}, question_length={len(request.question)}"
    )
    result = service.ask(request)
    logger.info(
        f"Ask completed: thread={result.thread_id}, "
        f"evidence={len(result.evidence)}, confidence={result.confidence}"
    )
    return result


@app.get("/assistant/threads", response_model=ThreadListResult, tags=["Assistant"])
def list_threads(
    channel_id: Optional[str] = Query(
        default=None, alias="channelId", min_length=1, max_length=64),
    limit: int = Query(default=20, ge=1, le=100),
    service: AssistantLiteService = Depends(get_assistant_service),
) -> ThreadListResult:
    """List threads, most recently updated first."""
    return service.list_threads(ThreadListInput(channel_id=channel_id, limit=limit))


@app.get(
    "/assistant/threads/{thread_id}/messages",
    response_model=ThreadMessagesResult,
    tags=["Assistant"],
)
def get_thread_messages(
    thread_id: str,
    service: AssistantLiteService = Depends(get_assistant_service),
) -> ThreadMessagesResult:
    return service.get_thread_messages(thread_id)


@app.get("/", tags=["System"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "service": "Assistant-Lite",
        "version": VERSION,
        "docs": "/docs" if config.server.debug else "disabled",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
        log_level=config.server.log_level.lower()
    )
