from sqlalchemy import select, insert, delete

from ..database import User, Message, Comment
from ..dto import CommentDTO
from ..exceptions import ConversationMismatch, NotFound, ValidationError
from ..interfaces import CommentInterface
from .base import BaseGateway, storage_errors


class CommentGateway(BaseGateway, CommentInterface):
    """Comments on messages.

    A user may leave several comments on the same message; removing
    deletes all of them at once.
    """

    __slots__ = ()

    @staticmethod
    async def _message_conversation(session, message_id: int, conversation_id: int | None) -> int:
        result = await session.execute(select(Message.conversation_id).where(Message.id == message_id))
        message_conversation_id = result.scalar_one_or_none()
        if message_conversation_id is None:
            raise NotFound("Message not found")
        if conversation_id is not None and message_conversation_id != conversation_id:
            raise ConversationMismatch()
        return message_conversation_id

    @storage_errors("adding comment")
    async def add_comment(self, message_id: int, conversation_id: int, author_id: int, text: str) -> CommentDTO:
        async with self._db_manager.session() as session:
            await self._message_conversation(session, message_id, conversation_id)
            await self._require_participant(session, conversation_id, author_id)

            if not text or not text.strip():
                raise ValidationError("Comment text is required")

            stmt = insert(Comment).values(
                message_id=message_id,
                author_id=author_id,
                text=text
            ).returning(Comment)
            comment = (await session.execute(stmt)).scalars().first()

            result = await session.execute(select(User.name).where(User.id == author_id))
            return CommentDTO(
                id=comment.id,
                message_id=comment.message_id,
                author_id=comment.author_id,
                author=result.scalar_one(),
                text=comment.text,
                timestamp=comment.timestamp
            )

    @storage_errors("removing comment")
    async def remove_comments(self, message_id: int, conversation_id: int, actor_id: int) -> int:
        async with self._db_manager.session() as session:
            await self._message_conversation(session, message_id, conversation_id)

            stmt = delete(Comment).where(
                Comment.message_id == message_id,
                Comment.author_id == actor_id
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFound("Comment not found or user is not the author")
            return result.rowcount

    @storage_errors("getting comments")
    async def list_comments(
            self,
            message_id: int,
            conversation_id: int | None = None,
            actor_id: int | None = None
    ) -> list[CommentDTO]:
        async with self._db_manager.session() as session:
            message_conversation_id = await self._message_conversation(session, message_id, conversation_id)
            if actor_id is not None:
                await self._require_participant(session, message_conversation_id, actor_id)

            stmt = (
                select(Comment, User.name)
                .join(User, User.id == Comment.author_id)
                .where(Comment.message_id == message_id)
                .order_by(Comment.timestamp, Comment.id)
                .limit(self._limits.comments)
            )
            result = await session.execute(stmt)
            return [
                CommentDTO(
                    id=comment.id,
                    message_id=comment.message_id,
                    author_id=comment.author_id,
                    author=name,
                    text=comment.text,
                    timestamp=comment.timestamp
                ) for comment, name in result.all()
            ]
