from sqlalchemy import select, insert, func
from sqlalchemy.exc import IntegrityError

from ..codec import decode_photo
from ..database import User, Conversation, Participant, Message
from ..dto import (
    ConversationDTO,
    ConversationKind,
    ConversationSummaryDTO,
    MessageKind,
    MessagePreviewDTO,
)
from ..exceptions import NotFound, ValidationError
from ..interfaces import ConversationInterface
from .base import BaseGateway, storage_errors

PHOTO_PREVIEW = "Photo"


def direct_key(first_user_id: int, second_user_id: int) -> str:
    """Order-independent key identifying the direct conversation of a pair."""
    low, high = sorted((first_user_id, second_user_id))
    return f"{low}:{high}"


class ConversationGateway(BaseGateway, ConversationInterface):
    """Conversation registry: direct and group conversations under one table."""

    __slots__ = ()

    async def _start_direct(self, initiator_id: int, recipient_name: str) -> ConversationDTO:
        async with self._db_manager.session() as session:
            result = await session.execute(select(User.id).where(User.name == recipient_name))
            recipient_id = result.scalar_one_or_none()
            if recipient_id is None:
                raise NotFound("Recipient user not found")

            result = await session.execute(select(User.id).where(User.id == initiator_id))
            if result.scalar_one_or_none() is None:
                raise NotFound("User not found")

            if recipient_id == initiator_id:
                raise ValidationError("Cannot start a conversation with yourself")

            key = direct_key(initiator_id, recipient_id)
            result = await session.execute(select(Conversation).where(Conversation.direct_key == key))
            conversation = result.scalars().first()

            if conversation is None:
                stmt = insert(Conversation).values(
                    kind=ConversationKind.DIRECT,
                    direct_key=key
                ).returning(Conversation)
                conversation = (await session.execute(stmt)).scalars().first()

                await session.execute(
                    insert(Participant),
                    [
                        {"conversation_id": conversation.id, "user_id": initiator_id},
                        {"conversation_id": conversation.id, "user_id": recipient_id},
                    ]
                )
                self._logger.info(
                    "Direct conversation %s created for users %s and %s",
                    conversation.id, initiator_id, recipient_id
                )

            return await self._hydrate_conversation(session, conversation)

    @storage_errors("starting conversation")
    async def start_direct(self, initiator_id: int, recipient_name: str) -> ConversationDTO:
        try:
            return await self._start_direct(initiator_id, recipient_name)
        except IntegrityError:
            # a concurrent request created the pair first; its conversation is the one to return
            self._logger.info("Direct conversation for user %s raced, reloading", initiator_id)
            return await self._start_direct(initiator_id, recipient_name)

    @storage_errors("creating group")
    async def create_group(self, creator_id: int, name: str) -> ConversationDTO:
        async with self._db_manager.session() as session:
            result = await session.execute(select(User.id).where(User.id == creator_id))
            if result.scalar_one_or_none() is None:
                raise NotFound("User not found")

            stmt = insert(Conversation).values(
                kind=ConversationKind.GROUP,
                name=name
            ).returning(Conversation)
            group = (await session.execute(stmt)).scalars().first()

            await session.execute(
                insert(Participant).values(conversation_id=group.id, user_id=creator_id)
            )
            return await self._hydrate_conversation(session, group)

    @storage_errors("getting conversation")
    async def get_conversation(self, conversation_id: int, user_id: int) -> ConversationDTO:
        async with self._db_manager.session() as session:
            # participation first, so a non-member learns nothing about the id
            await self._require_participant(session, conversation_id, user_id)

            result = await session.execute(select(Conversation).where(Conversation.id == conversation_id))
            conversation = result.scalars().first()
            if conversation is None:
                raise NotFound("Conversation not found")

            return await self._hydrate_conversation(session, conversation)

    @storage_errors("getting group")
    async def get_group(self, conversation_id: int, user_id: int) -> ConversationDTO:
        async with self._db_manager.session() as session:
            group = await self._get_group(session, conversation_id)
            await self._require_participant(session, conversation_id, user_id, "You are not a member of this group")
            return await self._hydrate_conversation(session, group)

    @storage_errors("listing conversations")
    async def list_conversations(self, user_id: int) -> list[ConversationSummaryDTO]:
        async with self._db_manager.session() as session:
            ranked = (
                select(
                    Message.conversation_id,
                    Message.timestamp,
                    Message.kind,
                    Message.text,
                    func.row_number().over(
                        partition_by=Message.conversation_id,
                        order_by=(Message.timestamp.desc(), Message.id.desc())
                    ).label("position")
                )
                .subquery()
            )
            last_message = (
                select(ranked.c.conversation_id, ranked.c.timestamp, ranked.c.kind, ranked.c.text)
                .where(ranked.c.position == 1)
                .subquery()
            )

            stmt = (
                select(
                    Conversation,
                    last_message.c.timestamp,
                    last_message.c.kind,
                    last_message.c.text
                )
                .join(Participant, Participant.conversation_id == Conversation.id)
                .outerjoin(last_message, last_message.c.conversation_id == Conversation.id)
                .where(Participant.user_id == user_id)
                .order_by(
                    last_message.c.timestamp.is_(None),
                    last_message.c.timestamp.desc(),
                    Conversation.id.desc()
                )
                .limit(self._limits.conversations)
            )
            rows = (await session.execute(stmt)).all()
            participants = await self._participant_names(session, [row[0].id for row in rows])

            summaries = []
            for conversation, last_at, last_kind, last_text in rows:
                preview = None
                if last_at is not None:
                    is_photo = last_kind in (MessageKind.PHOTO, MessageKind.PHOTO.value)
                    preview = MessagePreviewDTO(
                        timestamp=last_at,
                        preview=PHOTO_PREVIEW if is_photo else (last_text or "")
                    )
                summaries.append(
                    ConversationSummaryDTO(
                        id=conversation.id,
                        kind=conversation.kind,
                        name=conversation.name,
                        photo=conversation.photo,
                        participants=participants[conversation.id],
                        last_message=preview
                    )
                )
            return summaries

    @storage_errors("updating group name")
    async def rename_group(self, conversation_id: int, name: str, actor_id: int | None = None) -> ConversationDTO:
        async with self._db_manager.session() as session:
            group = await self._get_group(session, conversation_id)
            if actor_id is not None:
                await self._require_participant(session, conversation_id, actor_id, "You are not a member of this group")

            group.name = name
            await session.flush()
            return await self._hydrate_conversation(session, group)

    @storage_errors("updating group photo")
    async def set_group_photo(self, conversation_id: int, photo: str, actor_id: int | None = None) -> ConversationDTO:
        async with self._db_manager.session() as session:
            group = await self._get_group(session, conversation_id)
            if actor_id is not None:
                await self._require_participant(session, conversation_id, actor_id, "You are not a member of this group")

            group.photo = decode_photo(photo)
            await session.flush()
            return await self._hydrate_conversation(session, group)
