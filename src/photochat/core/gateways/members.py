from sqlalchemy import select, insert, delete
from sqlalchemy.exc import IntegrityError

from ..database import User, Participant
from ..dto import ConversationDTO
from ..exceptions import NotFound
from ..interfaces import MembershipInterface
from .base import BaseGateway, storage_errors


class MembershipGateway(BaseGateway, MembershipInterface):
    """Adds and removes group participants."""

    __slots__ = ()

    async def _add_members(
            self,
            conversation_id: int,
            names: list[str],
            actor_id: int | None
    ) -> ConversationDTO:
        async with self._db_manager.session() as session:
            group = await self._get_group(session, conversation_id)
            if actor_id is not None:
                await self._require_participant(session, conversation_id, actor_id, "You are not a member of this group")

            wanted = set(names)
            if wanted:
                result = await session.execute(select(User.id, User.name).where(User.name.in_(wanted)))
                found = dict(result.all())

                skipped = wanted - set(found.values())
                if skipped:
                    self._logger.info("Skipping unknown usernames for group %s: %s", conversation_id, sorted(skipped))

                result = await session.execute(
                    select(Participant.user_id).where(Participant.conversation_id == conversation_id)
                )
                current = set(result.scalars().all())

                new_ids = sorted(set(found) - current)
                if new_ids:
                    await session.execute(
                        insert(Participant),
                        [{"conversation_id": conversation_id, "user_id": user_id} for user_id in new_ids]
                    )

            return await self._hydrate_conversation(session, group)

    @storage_errors("adding group members")
    async def add_members(
            self,
            conversation_id: int,
            names: list[str],
            actor_id: int | None = None
    ) -> ConversationDTO:
        try:
            return await self._add_members(conversation_id, names, actor_id)
        except IntegrityError:
            # a concurrent add inserted the same participant first, the rerun skips it
            self._logger.info("Adding members to group %s raced, retrying", conversation_id)
            return await self._add_members(conversation_id, names, actor_id)

    @storage_errors("removing group member")
    async def remove_member(self, conversation_id: int, user_id: int) -> None:
        async with self._db_manager.session() as session:
            await self._get_group(session, conversation_id)

            stmt = delete(Participant).where(
                Participant.conversation_id == conversation_id,
                Participant.user_id == user_id
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFound("User is not a member of this group")
            # an emptied group stays in place
