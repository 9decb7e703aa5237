"""Tests for group membership (MembershipGateway)."""

import asyncio

import pytest

from photochat.core.exceptions import Forbidden, NotFound
from photochat.core.gateways import ConversationGateway, MembershipGateway, UserGateway


class TestAddMembers:
    @pytest.mark.asyncio
    async def test_unknown_names_are_skipped(self, conversations, members, alice, bob, carol):
        group = await conversations.create_group(alice.id, "Trip")

        updated = await members.add_members(group.id, ["bob", "carol", "ghost_user_404"], actor_id=alice.id)

        assert updated.participants == ["alice", "bob", "carol"]

    @pytest.mark.asyncio
    async def test_existing_members_not_duplicated(self, conversations, members, alice, bob):
        group = await conversations.create_group(alice.id, "Trip")
        await members.add_members(group.id, ["bob"], actor_id=alice.id)

        updated = await members.add_members(group.id, ["bob", "alice", "bob"], actor_id=alice.id)

        assert updated.participants == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_added_member_sees_group(self, conversations, members, alice, bob):
        group = await conversations.create_group(alice.id, "Trip")
        await members.add_members(group.id, ["bob"], actor_id=alice.id)

        summaries = await conversations.list_conversations(bob.id)

        assert [s.id for s in summaries] == [group.id]

    @pytest.mark.asyncio
    async def test_non_member_actor_forbidden(self, conversations, members, alice, bob, carol):
        group = await conversations.create_group(alice.id, "Trip")

        with pytest.raises(Forbidden):
            await members.add_members(group.id, ["carol"], actor_id=bob.id)

    @pytest.mark.asyncio
    async def test_direct_conversation_rejected(self, members, direct_chat, alice, carol):
        with pytest.raises(NotFound):
            await members.add_members(direct_chat.id, ["carol"], actor_id=alice.id)

    @pytest.mark.asyncio
    async def test_unknown_group(self, members, alice):
        with pytest.raises(NotFound):
            await members.add_members(9999, ["bob"], actor_id=alice.id)


class TestRemoveMember:
    @pytest.mark.asyncio
    async def test_leave_group(self, conversations, members, alice, bob):
        group = await conversations.create_group(alice.id, "Trip")
        await members.add_members(group.id, ["bob"], actor_id=alice.id)

        await members.remove_member(group.id, bob.id)

        assert (await conversations.get_group(group.id, alice.id)).participants == ["alice"]
        with pytest.raises(Forbidden):
            await conversations.get_group(group.id, bob.id)

    @pytest.mark.asyncio
    async def test_not_a_member(self, conversations, members, alice, bob):
        group = await conversations.create_group(alice.id, "Trip")

        with pytest.raises(NotFound):
            await members.remove_member(group.id, bob.id)

    @pytest.mark.asyncio
    async def test_emptied_group_persists(self, conversations, members, alice):
        group = await conversations.create_group(alice.id, "Trip")

        await members.remove_member(group.id, alice.id)

        # still addressable: renaming without an actor finds it
        renamed = await conversations.rename_group(group.id, "Ghost town")
        assert renamed.participants == []

    @pytest.mark.asyncio
    async def test_cannot_leave_direct_conversation(self, members, direct_chat, alice):
        with pytest.raises(NotFound):
            await members.remove_member(direct_chat.id, alice.id)

    @pytest.mark.asyncio
    async def test_messages_survive_sender_leaving(self, conversations, members, messages, alice, bob):
        group = await conversations.create_group(alice.id, "Trip")
        await members.add_members(group.id, ["bob"], actor_id=alice.id)
        await messages.send_message(group.id, bob.id, "text", text="bye")

        await members.remove_member(group.id, bob.id)

        conversation = await conversations.get_conversation(group.id, alice.id)
        assert [(m.sender, m.text) for m in conversation.messages] == [("bob", "bye")]

    @pytest.mark.asyncio
    async def test_removed_member_can_no_longer_post_or_comment(
            self, conversations, members, messages, comments, alice, bob
    ):
        group = await conversations.create_group(alice.id, "Trip")
        await members.add_members(group.id, ["bob"], actor_id=alice.id)
        message = await messages.send_message(group.id, alice.id, "text", text="plans?")

        await members.remove_member(group.id, bob.id)

        with pytest.raises(Forbidden):
            await messages.send_message(group.id, bob.id, "text", text="still here?")
        with pytest.raises(Forbidden):
            await comments.add_comment(message.id, group.id, bob.id, "me too")
        with pytest.raises(Forbidden):
            await members.add_members(group.id, ["bob"], actor_id=bob.id)


class TestConcurrentAddMembers:
    @pytest.mark.asyncio
    async def test_same_member_added_concurrently(self, file_db_manager):
        users = UserGateway(file_db_manager, b"placeholder")
        conversations = ConversationGateway(file_db_manager)
        members = MembershipGateway(file_db_manager)
        alice, _ = await users.register_or_login("alice")
        await users.register_or_login("bob")
        group = await conversations.create_group(alice.id, "Trip")

        results = await asyncio.gather(
            *[members.add_members(group.id, ["bob"], actor_id=alice.id) for _ in range(4)]
        )

        assert [updated.participants for updated in results] == [["alice", "bob"]] * 4
        assert (await conversations.get_group(group.id, alice.id)).participants == ["alice", "bob"]
