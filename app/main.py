import logging
from contextlib import asynccontextmanager
from typing import List, Optional
from uuid import UUID

from fastapi import FastAPI, Response, Request, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.config import settings
from app.storage import init_db, check_db_health, get_db
from app.logging_utils import setup_logging, RequestLoggingMiddleware, log_message_operation
from app.error_handlers import register_error_handlers
from app.logic import MessageLogic, NOT_FOUND_MESSAGE
from app.mapper import to_response
from app.metrics import record_message_outcome, get_metrics, get_metrics_content_type
from app.models import Message
from app.repository import SqlAlchemyMessageRepository
from app.results import Created, Result
from app.schemas import (
    HealthResponse,
    ErrorResponse,
    MessageResponse,
    CreateMessageRequest,
    UpdateMessageRequest,
)


setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables. Nothing to clean up on shutdown.
    """
    init_db()
    yield


app = FastAPI(
    title="Organization Messages API",
    description="CRUD service for organization-scoped messages",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
register_error_handlers(app)


def get_message_logic(db: Session = Depends(get_db)) -> MessageLogic:
    """Build the decision layer over a request-scoped repository."""
    return MessageLogic(SqlAlchemyMessageRepository(db))


def _respond(request: Request, operation: str, organization_id: UUID, result: Result, message_id: Optional[UUID] = None) -> Response:
    """Record the outcome in logs and metrics, then map it to a response."""
    if isinstance(result, Created):
        message_id = result.message.id

    record_message_outcome(operation, result.kind)
    log_message_operation(
        request=request,
        operation=operation,
        organization_id=str(organization_id),
        message_id=str(message_id) if message_id is not None else None,
        result=result.kind,
    )

    def location_for(message: Message) -> str:
        return str(request.url_for(
            "get_message",
            organization_id=str(message.organization_id),
            message_id=str(message.id),
        ))

    return to_response(result, location_for)


# =============================================================================
# Health Check Routes
# =============================================================================

@app.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """
    Liveness probe - always returns 200 once the app is running.
    """
    return HealthResponse(status="ok")


@app.get("/health/ready", response_model=HealthResponse)
async def health_ready(response: Response) -> HealthResponse:
    """
    Readiness probe - returns 200 only if the DB is reachable and the
    messages table exists, otherwise 503.
    """
    if not check_db_health():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not_ready",
            reason="Database not reachable or schema not applied"
        )

    return HealthResponse(status="ready")


# =============================================================================
# Message Routes
# =============================================================================

MESSAGES_PATH = "/organizations/{organization_id}/messages"


@app.get(MESSAGES_PATH, response_model=List[MessageResponse])
async def list_messages(
    organization_id: UUID,
    logic: MessageLogic = Depends(get_message_logic),
) -> List[MessageResponse]:
    """List every message of the organization, oldest first."""
    messages = await logic.get_all_messages(organization_id)
    logger.info(f"GET messages for organization {organization_id}: returned {len(messages)}")
    return [MessageResponse.model_validate(msg) for msg in messages]


@app.get(
    MESSAGES_PATH + "/{message_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Message not found"}},
)
async def get_message(
    organization_id: UUID,
    message_id: UUID,
    logic: MessageLogic = Depends(get_message_logic),
):
    """Fetch a single message of the organization."""
    message = await logic.get_message(organization_id, message_id)
    if message is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": NOT_FOUND_MESSAGE},
        )
    return MessageResponse.model_validate(message)


@app.post(
    MESSAGES_PATH,
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    responses={
        400: {"description": "Validation error, keyed by field"},
        409: {"model": ErrorResponse, "description": "Title already used in organization"},
    },
)
async def create_message(
    request: Request,
    organization_id: UUID,
    body: CreateMessageRequest,
    logic: MessageLogic = Depends(get_message_logic),
) -> Response:
    """
    Create a message.

    - Title must be 3-200 characters and unique within the organization
    - Content must be 10-1000 characters
    - New messages start active
    """
    result = await logic.create_message(organization_id, body)
    return _respond(request, "create", organization_id, result)


@app.put(
    MESSAGES_PATH + "/{message_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"description": "Validation error, keyed by field"},
        404: {"model": ErrorResponse, "description": "Message not found"},
        409: {"model": ErrorResponse, "description": "Title already used in organization"},
    },
)
async def update_message(
    request: Request,
    organization_id: UUID,
    message_id: UUID,
    body: UpdateMessageRequest,
    logic: MessageLogic = Depends(get_message_logic),
) -> Response:
    """
    Replace title, content and active flag of an active message.
    Inactive messages cannot be updated.
    """
    result = await logic.update_message(organization_id, message_id, body)
    return _respond(request, "update", organization_id, result, message_id)


@app.delete(
    MESSAGES_PATH + "/{message_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"description": "Message is inactive"},
        404: {"model": ErrorResponse, "description": "Message not found"},
    },
)
async def delete_message(
    request: Request,
    organization_id: UUID,
    message_id: UUID,
    logic: MessageLogic = Depends(get_message_logic),
) -> Response:
    """Delete an active message. Inactive messages cannot be deleted."""
    result = await logic.delete_message(organization_id, message_id)
    return _respond(request, "delete", organization_id, result, message_id)


# =============================================================================
# Metrics Route
# =============================================================================

@app.get("/metrics")
async def metrics() -> Response:
    """
    Expose Prometheus-style metrics:
    - http_requests_total: Total HTTP requests by method, path, status
    - message_operations_total: Message operation outcomes
    - request_latency_seconds: Request latency histogram
    """
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type()
    )
