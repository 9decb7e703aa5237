from pydantic import BaseModel
from datetime import datetime

from photochat.core.codec import encode_photo
from photochat.core.dto import CommentDTO, MessageDTO


class MessageSendRequest(BaseModel):
    type: str  # "text" | "photo"
    text: str | None = None
    photo: str | None = None  # base64

class ForwardRequest(BaseModel):
    conversation_id: int

class CommentRequest(BaseModel):
    text: str

class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    sender: str
    type: str
    text: str | None = None
    photo: str | None = None
    timestamp: datetime
    comments_count: int
    comments_authors: list[str]

    @classmethod
    def from_dto(cls, message: MessageDTO) -> "MessageResponse":
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            sender=message.sender,
            type=message.kind.value,
            text=message.text,
            photo=encode_photo(message.photo),
            timestamp=message.timestamp,
            comments_count=message.comments_count,
            comments_authors=message.comments_authors
        )

class CommentResponse(BaseModel):
    id: int
    message_id: int
    username: str
    text: str
    timestamp: datetime

    @classmethod
    def from_dto(cls, comment: CommentDTO) -> "CommentResponse":
        return cls(
            id=comment.id,
            message_id=comment.message_id,
            username=comment.author,
            text=comment.text,
            timestamp=comment.timestamp
        )
