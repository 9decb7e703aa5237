from sqlalchemy import select, insert, delete

from ..codec import decode_photo
from ..database import Message, Comment
from ..dto import MessageDTO, MessageKind
from ..exceptions import ConversationMismatch, Forbidden, NotFound, ValidationError
from ..interfaces import MessageInterface
from .base import BaseGateway, storage_errors


def validate_payload(kind: MessageKind | str, text: str | None, photo: str | None) -> tuple[MessageKind, str | None, bytes | None]:
    """
    Enforces that exactly one payload matching the kind is present.
    :return: (kind, text, decoded photo)
    """
    try:
        kind = MessageKind(kind)
    except ValueError as e:
        raise ValidationError("Message type must be 'text' or 'photo'") from e

    if kind is MessageKind.TEXT:
        if photo:
            raise ValidationError("Text message must not carry a photo")
        if not text or not text.strip():
            raise ValidationError("Text message requires text content")
        return kind, text, None

    if text:
        raise ValidationError("Photo message must not carry text")
    return kind, None, decode_photo(photo)


class MessageGateway(BaseGateway, MessageInterface):
    """Per-conversation message log: send, forward, delete."""

    __slots__ = ()

    async def _insert_message(
            self,
            session,
            conversation_id: int,
            sender_id: int,
            kind: MessageKind,
            text: str | None,
            photo: bytes | None
    ) -> MessageDTO:
        stmt = insert(Message).values(
            conversation_id=conversation_id,
            sender_id=sender_id,
            kind=kind,
            text=text,
            photo=photo
        ).returning(Message.id)
        message_id = (await session.execute(stmt)).scalar_one()
        return await self._load_message(session, message_id)

    @storage_errors("sending message")
    async def send_message(
            self,
            conversation_id: int,
            sender_id: int,
            kind: MessageKind | str,
            text: str | None = None,
            photo: str | None = None
    ) -> MessageDTO:
        async with self._db_manager.session() as session:
            await self._require_participant(session, conversation_id, sender_id)
            kind, text, data = validate_payload(kind, text, photo)
            return await self._insert_message(session, conversation_id, sender_id, kind, text, data)

    @storage_errors("forwarding message")
    async def forward_message(self, message_id: int, target_conversation_id: int, actor_id: int) -> MessageDTO:
        async with self._db_manager.session() as session:
            result = await session.execute(select(Message).where(Message.id == message_id))
            original = result.scalars().first()
            if original is None:
                raise NotFound("Original message not found")

            # only the destination matters, the actor may have left the source conversation
            await self._require_participant(
                session,
                target_conversation_id,
                actor_id,
                "You are not a participant in the recipient conversation"
            )

            return await self._insert_message(
                session,
                target_conversation_id,
                actor_id,
                original.kind,
                original.text,
                original.photo
            )

    @storage_errors("deleting message")
    async def delete_message(self, message_id: int, conversation_id: int, actor_id: int) -> None:
        async with self._db_manager.session() as session:
            result = await session.execute(
                select(Message.sender_id, Message.conversation_id).where(Message.id == message_id)
            )
            row = result.first()
            if row is None:
                raise NotFound("Message not found")

            sender_id, message_conversation_id = row
            if message_conversation_id != conversation_id:
                raise ConversationMismatch()
            if sender_id != actor_id:
                raise Forbidden("Only the sender can delete this message")

            # explicit, so the cascade does not depend on the backend enforcing foreign keys
            await session.execute(delete(Comment).where(Comment.message_id == message_id))
            await session.execute(delete(Message).where(Message.id == message_id))
            self._logger.info("Message %s deleted by user %s", message_id, actor_id)
