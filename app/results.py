"""
Outcomes returned by the message decision layer.

Each mutating operation of MessageLogic returns exactly one of these
variants. Expected failures (missing message, duplicate title, bad input)
are values, not exceptions; only infrastructure failures raise.

``kind`` is a stable name for each variant, used in logs and metrics.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Union

from app.models import Message


@dataclass(frozen=True)
class Created:
    message: Message
    kind: ClassVar[str] = "created"


@dataclass(frozen=True)
class Updated:
    kind: ClassVar[str] = "updated"


@dataclass(frozen=True)
class Deleted:
    kind: ClassVar[str] = "deleted"


@dataclass(frozen=True)
class NotFound:
    message: str
    kind: ClassVar[str] = "not_found"


@dataclass(frozen=True)
class Conflict:
    message: str
    kind: ClassVar[str] = "conflict"


@dataclass(frozen=True)
class ValidationError:
    """Field name -> list of error messages, e.g. ``{"Title": [...]}``."""
    errors: Dict[str, List[str]] = field(default_factory=dict)
    kind: ClassVar[str] = "validation_error"


Result = Union[Created, Updated, Deleted, NotFound, Conflict, ValidationError]
