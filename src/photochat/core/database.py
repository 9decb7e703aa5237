from sqlalchemy import ForeignKey, String, Text, DateTime, Index, LargeBinary, Enum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from datetime import datetime, timezone
from typing import List, Optional

from .dto import ConversationKind, MessageKind


def utcnow() -> datetime:
    # naive UTC, the form SQLite hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Base(DeclarativeBase):
    pass

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(25), unique=True, index=True)
    photo: Mapped[bytes] = mapped_column(LargeBinary)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    participations: Mapped[List["Participant"]] = relationship(
        "Participant",
        back_populates="user"
    )
    sent_messages: Mapped[List["Message"]] = relationship(
        "Message",
        back_populates="sender"
    )

class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[ConversationKind] = mapped_column(
        Enum(ConversationKind, values_callable=_enum_values, native_enum=False, length=10)
    )
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photo: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    # "<low id>:<high id>" for direct conversations, NULL for groups
    direct_key: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    participants: Mapped[List["Participant"]] = relationship(
        "Participant",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    messages: Mapped[List["Message"]] = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

class Participant(Base):
    __tablename__ = "conversation_participants"

    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"),
        primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    conversation: Mapped["Conversation"] = relationship(
        "Conversation",
        back_populates="participants"
    )
    user: Mapped["User"] = relationship(
        "User",
        back_populates="participations"
    )

    __table_args__ = (
        Index('ix_participants_user', 'user_id'),
    )

class Message(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(primary_key=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id", ondelete="CASCADE"))
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    kind: Mapped[MessageKind] = mapped_column(
        Enum(MessageKind, values_callable=_enum_values, native_enum=False, length=10)
    )
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photo: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    conversation: Mapped["Conversation"] = relationship(
        "Conversation",
        back_populates="messages"
    )
    sender: Mapped["User"] = relationship(
        "User",
        back_populates="sent_messages"
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="message",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index('ix_messages_conversation_timestamp', 'conversation_id', 'timestamp'),
    )

class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    message_id: Mapped[int] = mapped_column(ForeignKey("messages.id", ondelete="CASCADE"))
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    text: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    message: Mapped["Message"] = relationship(
        "Message",
        back_populates="comments"
    )

    __table_args__ = (
        Index('ix_comments_message', 'message_id'),
        Index('ix_comments_message_author', 'message_id', 'author_id'),
    )
