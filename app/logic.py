"""
Decision layer for organization messages.

MessageLogic validates requests, enforces the business rules (title
uniqueness per organization, active-only mutation) and drives the
repository. It returns a Result variant from app.results for every
mutating call and never catches repository errors.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from app.models import Message
from app.repository import MessageRepository
from app.results import Conflict, Created, Deleted, NotFound, Result, Updated, ValidationError
from app.schemas import CreateMessageRequest, UpdateMessageRequest

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
CONTENT_MIN_LENGTH = 10
CONTENT_MAX_LENGTH = 1000

NOT_FOUND_MESSAGE = "Message not found."


def _is_valid_text(value: Optional[str], min_length: int, max_length: int) -> bool:
    if value is None or not value.strip():
        return False
    return min_length <= len(value) <= max_length


def validate_fields(
    title: Optional[str],
    content: Optional[str],
    title_error: str,
) -> Dict[str, List[str]]:
    """
    Check title and content bounds.

    Both fields are always checked, so a request with two bad fields gets
    both errors back. Returns an empty dict when the input is valid.
    """
    errors: Dict[str, List[str]] = {}
    if not _is_valid_text(title, TITLE_MIN_LENGTH, TITLE_MAX_LENGTH):
        errors["Title"] = [title_error]
    if not _is_valid_text(content, CONTENT_MIN_LENGTH, CONTENT_MAX_LENGTH):
        errors["Content"] = ["Content must be 10–1000 characters."]
    return errors


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageLogic:
    def __init__(self, repository: MessageRepository):
        self.repository = repository

    async def get_all_messages(self, organization_id: UUID) -> List[Message]:
        return await self.repository.get_all_by_organization(organization_id)

    async def get_message(self, organization_id: UUID, message_id: UUID) -> Optional[Message]:
        return await self.repository.get_by_id(organization_id, message_id)

    async def create_message(self, organization_id: UUID, request: CreateMessageRequest) -> Result:
        errors = validate_fields(
            request.title,
            request.content,
            title_error="Title is required and must be 3–200 characters.",
        )
        if errors:
            logger.info(f"Create rejected for organization {organization_id}: invalid {sorted(errors)}")
            return ValidationError(errors)

        existing = await self.repository.get_by_title(organization_id, request.title)
        if existing is not None:
            logger.info(f"Create rejected for organization {organization_id}: duplicate title")
            return Conflict("Title must be unique per organization.")

        message = Message(
            id=uuid.uuid4(),
            organization_id=organization_id,
            title=request.title,
            content=request.content,
            is_active=True,
            created_at=_utcnow(),
            updated_at=None,
        )
        created = await self.repository.create(message)
        logger.info(f"Message created: {created.id} in organization {organization_id}")
        return Created(created)

    async def update_message(
        self,
        organization_id: UUID,
        message_id: UUID,
        request: UpdateMessageRequest,
    ) -> Result:
        existing = await self.repository.get_by_id(organization_id, message_id)
        if existing is None:
            return NotFound(NOT_FOUND_MESSAGE)

        # Checked before field validation
        if not existing.is_active:
            return ValidationError({"IsActive": ["Inactive messages cannot be updated."]})

        errors = validate_fields(
            request.title,
            request.content,
            title_error="Title must be 3–200 characters.",
        )
        if errors:
            return ValidationError(errors)

        same_title = await self.repository.get_by_title(organization_id, request.title)
        if same_title is not None and same_title.id != message_id:
            logger.info(f"Update of {message_id} rejected: title held by {same_title.id}")
            return Conflict("Another message with this title already exists.")

        existing.title = request.title
        existing.content = request.content
        existing.is_active = request.is_active
        existing.updated_at = _utcnow()

        updated = await self.repository.update(existing)
        if updated is None:
            return NotFound(NOT_FOUND_MESSAGE)

        logger.info(f"Message updated: {message_id} (active={request.is_active})")
        return Updated()

    async def delete_message(self, organization_id: UUID, message_id: UUID) -> Result:
        existing = await self.repository.get_by_id(organization_id, message_id)
        if existing is None:
            return NotFound(NOT_FOUND_MESSAGE)

        if not existing.is_active:
            return ValidationError({"IsActive": ["Only active messages can be deleted."]})

        deleted = await self.repository.delete(organization_id, message_id)
        if not deleted:
            return NotFound(NOT_FOUND_MESSAGE)

        logger.info(f"Message deleted: {message_id}")
        return Deleted()
