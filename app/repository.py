"""
Message repository.

MessageRepository is the storage contract consumed by MessageLogic. Every
lookup takes the organization id explicitly so no query can leave its
organization.

SqlAlchemyMessageRepository implements the contract over a request-scoped
SQLAlchemy session. Database errors are not caught here: they propagate to
the HTTP layer, which turns them into 500 responses.
"""

import logging
from typing import List, Optional, Protocol
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.models import Message

logger = logging.getLogger(__name__)


class MessageRepository(Protocol):
    async def get_all_by_organization(self, organization_id: UUID) -> List[Message]:
        ...

    async def get_by_id(self, organization_id: UUID, message_id: UUID) -> Optional[Message]:
        ...

    async def get_by_title(self, organization_id: UUID, title: str) -> Optional[Message]:
        ...

    async def create(self, message: Message) -> Message:
        ...

    async def update(self, message: Message) -> Optional[Message]:
        ...

    async def delete(self, organization_id: UUID, message_id: UUID) -> bool:
        ...


class SqlAlchemyMessageRepository:
    """Message storage backed by the ``messages`` table."""

    def __init__(self, db: Session):
        self.db = db

    async def get_all_by_organization(self, organization_id: UUID) -> List[Message]:
        messages = (
            self.db.query(Message)
            .filter(Message.organization_id == organization_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )
        logger.debug(f"Loaded {len(messages)} messages for organization {organization_id}")
        return messages

    async def get_by_id(self, organization_id: UUID, message_id: UUID) -> Optional[Message]:
        message = (
            self.db.query(Message)
            .filter(Message.organization_id == organization_id, Message.id == message_id)
            .first()
        )
        logger.debug(f"Message lookup by id {message_id}: {'found' if message else 'not found'}")
        return message

    async def get_by_title(self, organization_id: UUID, title: str) -> Optional[Message]:
        return (
            self.db.query(Message)
            .filter(Message.organization_id == organization_id, Message.title == title)
            .first()
        )

    async def create(self, message: Message) -> Message:
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.info(f"Message stored: {message.id}")
        return message

    async def update(self, message: Message) -> Optional[Message]:
        """
        Persist changes made to a loaded message.

        Returns None when the row was removed after it was loaded.
        """
        # rollback expires the instance, so keep the id for logging
        message_id = message.id
        try:
            self.db.add(message)
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            logger.warning(f"Message {message_id} disappeared before update")
            return None
        self.db.refresh(message)
        return message

    async def delete(self, organization_id: UUID, message_id: UUID) -> bool:
        deleted = (
            self.db.query(Message)
            .filter(Message.organization_id == organization_id, Message.id == message_id)
            .delete(synchronize_session="fetch")
        )
        self.db.commit()
        logger.info(f"Delete message {message_id}: {deleted} row(s) removed")
        return deleted > 0
