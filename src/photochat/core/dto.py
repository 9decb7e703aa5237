from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class ConversationKind(str, Enum):
    DIRECT = "direct"
    GROUP = "group"

class MessageKind(str, Enum):
    TEXT = "text"
    PHOTO = "photo"

class UserDTO(BaseModel):
    id: int
    name: str
    photo: bytes

class MessageDTO(BaseModel):
    id: int
    conversation_id: int
    sender_id: int
    sender: str  # username
    kind: MessageKind
    text: str | None = None
    photo: bytes | None = None
    timestamp: datetime
    comments_count: int = 0
    comments_authors: list[str] = Field(default_factory=list)  # most recent first

class CommentDTO(BaseModel):
    id: int
    message_id: int
    author_id: int
    author: str  # username
    text: str
    timestamp: datetime

class ConversationDTO(BaseModel):
    id: int
    kind: ConversationKind
    name: str | None = None
    photo: bytes | None = None
    participants: list[str] = Field(default_factory=list)
    messages: list[MessageDTO] = Field(default_factory=list)

class MessagePreviewDTO(BaseModel):
    timestamp: datetime
    preview: str

class ConversationSummaryDTO(BaseModel):
    id: int
    kind: ConversationKind
    name: str | None = None
    photo: bytes | None = None
    participants: list[str] = Field(default_factory=list)
    last_message: MessagePreviewDTO | None = None
