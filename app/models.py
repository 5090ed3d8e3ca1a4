"""
SQLAlchemy ORM models for database tables.

For Pydantic request/response schemas, see schemas.py.
"""

from datetime import timezone

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text, TypeDecorator, Uuid

from app.storage import Base


class UTCDateTime(TypeDecorator):
    """
    DateTime stored as UTC and always loaded as an aware UTC datetime.

    SQLite keeps no offset, so naive values read back are tagged UTC.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Message(Base):
    """
    An organization-scoped message.

    Table: messages
    Primary Key: id (assigned by the decision layer at creation)

    Title uniqueness per organization is enforced by MessageLogic, not by
    a database constraint; (organization_id, title) is only indexed.
    """
    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True)
    organization_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(timezone=True), nullable=False)
    updated_at = Column(UTCDateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_messages_organization_title", "organization_id", "title"),
    )

    def __repr__(self) -> str:
        return f"<Message id={self.id} organization_id={self.organization_id} title={self.title!r}>"
