from functools import wraps
from typing import Callable, Iterable
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photochat.config import LimitsConfig
from ..database import User, Conversation, Participant, Message, Comment
from ..db_manager import DatabaseManager
from ..dto import ConversationDTO, ConversationKind, MessageDTO
from ..exceptions import Forbidden, InternalError, NotFound


def storage_errors(action: str) -> Callable:
    """
    Logs storage failures raised by a gateway method and re-raises them as InternalError.
    Core errors pass through untouched.
    :param action: what the method was doing, for the log line
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                self._logger.error("Error %s in database: %s", action, e)
                raise InternalError(f"Failed {action}") from e
        return wrapper
    return decorator


class BaseGateway:
    __slots__ = ("_db_manager", "_logger", "_limits")

    def __init__(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger | None = None,
            limits: LimitsConfig | None = None
    ):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)
        self._limits = limits or LimitsConfig()

    @staticmethod
    async def _is_participant(session: AsyncSession, conversation_id: int, user_id: int) -> bool:
        stmt = select(Participant.user_id).where(
            Participant.conversation_id == conversation_id,
            Participant.user_id == user_id
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _require_participant(
            self,
            session: AsyncSession,
            conversation_id: int,
            user_id: int,
            message: str = "You are not a participant in this conversation"
    ) -> None:
        if not await self._is_participant(session, conversation_id, user_id):
            raise Forbidden(message)

    @staticmethod
    async def _get_group(session: AsyncSession, conversation_id: int) -> Conversation:
        stmt = select(Conversation).where(
            Conversation.id == conversation_id,
            Conversation.kind == ConversationKind.GROUP
        )
        result = await session.execute(stmt)
        group = result.scalars().first()
        if group is None:
            raise NotFound("Group not found")
        return group

    @staticmethod
    async def _participant_names(
            session: AsyncSession,
            conversation_ids: Iterable[int]
    ) -> dict[int, list[str]]:
        conversation_ids = list(conversation_ids)
        names: dict[int, list[str]] = {cid: [] for cid in conversation_ids}
        if not conversation_ids:
            return names

        stmt = (
            select(Participant.conversation_id, User.name)
            .join(User, User.id == Participant.user_id)
            .where(Participant.conversation_id.in_(conversation_ids))
            .order_by(Participant.conversation_id, User.name)
        )
        result = await session.execute(stmt)
        for conversation_id, name in result.all():
            names[conversation_id].append(name)
        return names

    async def _comment_summaries(
            self,
            session: AsyncSession,
            message_ids: list[int]
    ) -> dict[int, tuple[int, list[str]]]:
        """
        Comment count and distinct authors (most recent first, capped) per message.
        """
        summaries: dict[int, tuple[int, list[str]]] = {mid: (0, []) for mid in message_ids}
        if not message_ids:
            return summaries

        count_stmt = (
            select(Comment.message_id, func.count(Comment.id))
            .where(Comment.message_id.in_(message_ids))
            .group_by(Comment.message_id)
        )
        counts = dict((await session.execute(count_stmt)).all())

        last_comment = func.max(Comment.id).label("last_comment")
        authors_stmt = (
            select(Comment.message_id, User.name, func.max(Comment.timestamp).label("last_at"), last_comment)
            .join(User, User.id == Comment.author_id)
            .where(Comment.message_id.in_(message_ids))
            .group_by(Comment.message_id, User.name)
            .order_by(Comment.message_id, func.max(Comment.timestamp).desc(), last_comment.desc())
        )
        authors: dict[int, list[str]] = {mid: [] for mid in message_ids}
        for message_id, name, _, _ in (await session.execute(authors_stmt)).all():
            if len(authors[message_id]) < self._limits.comment_authors_preview:
                authors[message_id].append(name)

        for message_id in message_ids:
            summaries[message_id] = (counts.get(message_id, 0), authors[message_id])
        return summaries

    async def _load_messages(self, session: AsyncSession, *criteria) -> list[MessageDTO]:
        stmt = (
            select(Message, User.name)
            .join(User, User.id == Message.sender_id)
            .where(*criteria)
            .order_by(Message.timestamp, Message.id)
        )
        rows = (await session.execute(stmt)).all()
        summaries = await self._comment_summaries(session, [m.id for m, _ in rows])

        messages = []
        for msg, sender_name in rows:
            count, authors = summaries[msg.id]
            messages.append(
                MessageDTO(
                    id=msg.id,
                    conversation_id=msg.conversation_id,
                    sender_id=msg.sender_id,
                    sender=sender_name,
                    kind=msg.kind,
                    text=msg.text,
                    photo=msg.photo,
                    timestamp=msg.timestamp,
                    comments_count=count,
                    comments_authors=authors
                )
            )
        return messages

    async def _load_message(self, session: AsyncSession, message_id: int) -> MessageDTO:
        messages = await self._load_messages(session, Message.id == message_id)
        if not messages:
            raise NotFound("Message not found")
        return messages[0]

    async def _hydrate_conversation(
            self,
            session: AsyncSession,
            conversation: Conversation,
            with_messages: bool = True
    ) -> ConversationDTO:
        participants = await self._participant_names(session, [conversation.id])
        messages = []
        if with_messages:
            messages = await self._load_messages(session, Message.conversation_id == conversation.id)

        return ConversationDTO(
            id=conversation.id,
            kind=conversation.kind,
            name=conversation.name,
            photo=conversation.photo,
            participants=participants[conversation.id],
            messages=messages
        )
