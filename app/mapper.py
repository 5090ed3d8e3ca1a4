"""
Translate decision-layer outcomes into HTTP responses.
"""

from typing import Callable

from fastapi import Response, status
from fastapi.responses import JSONResponse

from app.models import Message
from app.results import Conflict, Created, Deleted, NotFound, Result, Updated, ValidationError
from app.schemas import MessageResponse


def serialize_message(message: Message) -> dict:
    return MessageResponse.model_validate(message).model_dump(mode="json", by_alias=True)


def to_response(result: Result, location_for: Callable[[Message], str]) -> Response:
    """
    Map a Result to its HTTP response.

    Args:
        result: Outcome returned by MessageLogic
        location_for: Builds the URL of a message, used for the Location
            header of 201 responses
    """
    if isinstance(result, Created):
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=serialize_message(result.message),
            headers={"Location": location_for(result.message)},
        )
    if isinstance(result, (Updated, Deleted)):
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    if isinstance(result, NotFound):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": result.message})
    if isinstance(result, Conflict):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"message": result.message})
    if isinstance(result, ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.errors)
    return Response(status_code=status.HTTP_400_BAD_REQUEST)
