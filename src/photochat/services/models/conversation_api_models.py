from pydantic import BaseModel, Field
from datetime import datetime

from photochat.core.codec import encode_photo
from photochat.core.dto import ConversationDTO, ConversationSummaryDTO
from .message_api_models import MessageResponse


class StartConversationRequest(BaseModel):
    username: str

class CreateGroupRequest(BaseModel):
    name: str = Field(..., min_length=1)

class GroupNameRequest(BaseModel):
    name: str = Field(..., min_length=1)

class GroupPhotoRequest(BaseModel):
    photo: str  # base64

class AddMembersRequest(BaseModel):
    members: list[str] = Field(..., min_length=1)

class MessagePreviewResponse(BaseModel):
    timestamp: datetime
    preview: str

class ConversationResponse(BaseModel):
    id: int
    type: str
    name: str | None = None
    photo: str | None = None
    participants: list[str]
    messages: list[MessageResponse]

    @classmethod
    def from_dto(cls, conversation: ConversationDTO) -> "ConversationResponse":
        return cls(
            id=conversation.id,
            type=conversation.kind.value,
            name=conversation.name,
            photo=encode_photo(conversation.photo),
            participants=conversation.participants,
            messages=[MessageResponse.from_dto(m) for m in conversation.messages]
        )

class ConversationSummaryResponse(BaseModel):
    id: int
    type: str
    name: str | None = None
    photo: str | None = None
    participants: list[str]
    last_message: MessagePreviewResponse | None = None

    @classmethod
    def from_dto(cls, summary: ConversationSummaryDTO) -> "ConversationSummaryResponse":
        last_message = None
        if summary.last_message is not None:
            last_message = MessagePreviewResponse(
                timestamp=summary.last_message.timestamp,
                preview=summary.last_message.preview
            )
        return cls(
            id=summary.id,
            type=summary.kind.value,
            name=summary.name,
            photo=encode_photo(summary.photo),
            participants=summary.participants,
            last_message=last_message
        )
