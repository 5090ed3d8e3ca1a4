"""
Pydantic schemas for request/response validation.

This module contains:
- Request models for incoming message payloads
- Response models for API responses

Request models only check JSON types. Title and content bounds are
business rules enforced by MessageLogic so they come back as field-keyed
400 responses instead of framework 422s.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


# =============================================================================
# Pydantic Request Models
# =============================================================================

class CreateMessageRequest(BaseModel):
    """Body of POST /organizations/{organization_id}/messages."""
    title: Optional[str] = Field(None, description="Message title, 3-200 characters")
    content: Optional[str] = Field(None, description="Message content, 10-1000 characters")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Hello World",
                    "content": "This is a valid content message.",
                }
            ]
        }
    }


class UpdateMessageRequest(BaseModel):
    """Body of PUT /organizations/{organization_id}/messages/{message_id}."""
    title: Optional[str] = Field(None, description="New title, 3-200 characters")
    content: Optional[str] = Field(None, description="New content, 10-1000 characters")
    is_active: bool = Field(
        True,
        alias="isActive",
        description="Desired active flag; false deactivates the message",
    )

    model_config = {
        "populate_by_name": True,  # Allow both 'isActive' and 'is_active'
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Hello World",
                    "content": "This is updated content.",
                    "isActive": True,
                }
            ]
        },
    }


# =============================================================================
# Pydantic Response Models
# =============================================================================

class MessageResponse(BaseModel):
    """
    A stored message as returned by the API.
    Maps ORM attributes to camelCase response fields.
    """
    id: UUID = Field(..., description="Message identifier")
    organization_id: UUID = Field(..., serialization_alias="organizationId")
    title: str
    content: str
    is_active: bool = Field(..., serialization_alias="isActive")
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(
        None,
        serialization_alias="updatedAt",
        description="Null until the message is first updated",
    )

    model_config = {
        "from_attributes": True,  # Allow creating from ORM objects
    }


class ErrorResponse(BaseModel):
    """Body of 404 and 409 responses."""
    message: str = Field(..., description="Error description")


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""
    status: str = Field(..., description="Health status")
    reason: Optional[str] = Field(None, description="Reason if not ready")
