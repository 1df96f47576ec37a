from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Identity, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_sync.infrastructure.db.base import Base


class ChatModel(Base):
    __tablename__ = "chats"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=text("now()"),
    )

    # relationships
    participants = relationship(
        "ChatParticipantModel",
        back_populates="chat",
        order_by="ChatParticipantModel.position",
        lazy="selectin",
    )
    message_links = relationship(
        "ChatMessageModel",
        back_populates="chat",
        order_by="ChatMessageModel.position",
        lazy="selectin",
    )

    __table_args__ = (Index("ix_chats_updated_at", updated_at.desc()),)


class ChatParticipantModel(Base):
    __tablename__ = "chat_participants"

    # insertion order is display order
    position: Mapped[int] = mapped_column(BigInteger, Identity(), primary_key=True)
    chat_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chats.id", ondelete="CASCADE"),
        nullable=False,
    )
    username: Mapped[str] = mapped_column(String(150), nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    chat = relationship("ChatModel", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("chat_id", "username", name="uq_chat_participant"),
        Index("ix_chat_participants_username", "username", "chat_id"),
    )


class ChatMessageModel(Base):
    """Links an existing message into one chat's log; position is append order."""

    __tablename__ = "chat_messages"

    position: Mapped[int] = mapped_column(BigInteger, Identity(), primary_key=True)
    chat_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chats.id", ondelete="CASCADE"),
        nullable=False,
    )
    message_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    chat = relationship("ChatModel", back_populates="message_links")
    message = relationship("MessageModel", lazy="selectin")

    __table_args__ = (Index("ix_chat_messages_timeline", "chat_id", "position"),)
