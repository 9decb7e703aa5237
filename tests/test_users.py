"""Tests for the identity directory (UserGateway)."""

import asyncio

import pytest

from photochat.config import Config, DBConfig, LimitsConfig
from photochat.core.exceptions import Conflict, NotFound, ValidationError
from photochat.core.gateways import UserGateway
from tests.helpers import PHOTO_B64, PHOTO_BYTES


class TestRegisterOrLogin:
    @pytest.mark.asyncio
    async def test_first_login_creates_user_with_default_photo(self, users, config):
        user, created = await users.register_or_login("alice")

        assert created is True
        assert user.name == "alice"
        assert user.photo == config.app.default_photo

    @pytest.mark.asyncio
    async def test_second_login_returns_same_user(self, users):
        first, _ = await users.register_or_login("alice")
        second, created = await users.register_or_login("alice")

        assert created is False
        assert second.id == first.id

    @pytest.mark.asyncio
    async def test_default_photo_comes_from_constructor(self, db_manager):
        gateway = UserGateway(db_manager, b"custom-placeholder")

        user, _ = await gateway.register_or_login("dave")

        assert user.photo == b"custom-placeholder"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["ab", "a" * 26, "has space", "bad!char", "ümlaut", ""])
    async def test_invalid_usernames_rejected(self, users, name):
        with pytest.raises(ValidationError):
            await users.register_or_login(name)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["abc", "a" * 25, "under_score", "dash-ed", "Mixed123"])
    async def test_valid_usernames_accepted(self, users, name):
        user, created = await users.register_or_login(name)

        assert created is True
        assert user.name == name


class TestLookup:
    @pytest.mark.asyncio
    async def test_get_by_id(self, users, alice):
        user = await users.get_user_by_id(alice.id)

        assert user.name == "alice"

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, users):
        with pytest.raises(NotFound):
            await users.get_user_by_id(9999)

    @pytest.mark.asyncio
    async def test_get_by_name_missing(self, users):
        with pytest.raises(NotFound):
            await users.get_user_by_name("nobody")


class TestSearch:
    @pytest.mark.asyncio
    async def test_substring_match_sorted(self, users):
        for name in ["zoe_anna", "anna", "bob", "hannah"]:
            await users.register_or_login(name)

        result = await users.search_users("ann")

        assert [u.name for u in result] == ["anna", "hannah", "zoe_anna"]

    @pytest.mark.asyncio
    async def test_search_is_case_sensitive(self, users):
        await users.register_or_login("Alice")
        await users.register_or_login("alice")

        result = await users.search_users("Ali")

        assert [u.name for u in result] == ["Alice"]

    @pytest.mark.asyncio
    async def test_empty_query_matches_everyone(self, users):
        for name in ["carl", "anna", "bob"]:
            await users.register_or_login(name)

        result = await users.search_users("")

        assert [u.name for u in result] == ["anna", "bob", "carl"]

    @pytest.mark.asyncio
    async def test_underscore_is_not_a_wildcard(self, users):
        await users.register_or_login("a_b")
        await users.register_or_login("axb")

        result = await users.search_users("a_b")

        assert [u.name for u in result] == ["a_b"]

    @pytest.mark.asyncio
    async def test_results_are_capped(self, db_manager):
        config = Config(db=DBConfig(path=":memory:"), limits=LimitsConfig(search=2))
        gateway = UserGateway(db_manager, config.app.default_photo, limits=config.limits)
        for name in ["aaa", "bbb", "ccc"]:
            await gateway.register_or_login(name)

        result = await gateway.search_users("")

        assert [u.name for u in result] == ["aaa", "bbb"]


class TestRename:
    @pytest.mark.asyncio
    async def test_rename(self, users, alice):
        user = await users.rename_user(alice.id, "alice_2")

        assert user.id == alice.id
        assert user.name == "alice_2"
        assert (await users.get_user_by_name("alice_2")).id == alice.id

    @pytest.mark.asyncio
    async def test_rename_to_taken_name_conflicts(self, users, alice, bob):
        with pytest.raises(Conflict):
            await users.rename_user(alice.id, "bob")

    @pytest.mark.asyncio
    async def test_rename_to_own_name_is_allowed(self, users, alice):
        user = await users.rename_user(alice.id, "alice")

        assert user.name == "alice"

    @pytest.mark.asyncio
    async def test_rename_invalid_format(self, users, alice):
        with pytest.raises(ValidationError):
            await users.rename_user(alice.id, "no")

    @pytest.mark.asyncio
    async def test_rename_missing_user(self, users):
        with pytest.raises(NotFound):
            await users.rename_user(4242, "ghost_user")


class TestSetPhoto:
    @pytest.mark.asyncio
    async def test_set_photo_stores_decoded_bytes(self, users, alice):
        user = await users.set_user_photo(alice.id, PHOTO_B64)

        assert user.photo == PHOTO_BYTES

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", ["not base64!!", "", "abc"])
    async def test_malformed_photo_rejected(self, users, alice, payload):
        with pytest.raises(ValidationError):
            await users.set_user_photo(alice.id, payload)

    @pytest.mark.asyncio
    async def test_set_photo_missing_user(self, users):
        with pytest.raises(NotFound):
            await users.set_user_photo(4242, PHOTO_B64)


class TestConcurrentRegistration:
    @pytest.mark.asyncio
    async def test_same_username_resolves_to_one_user(self, file_db_manager):
        gateway = UserGateway(file_db_manager, b"placeholder")

        results = await asyncio.gather(*[gateway.register_or_login("dave") for _ in range(6)])

        assert len({user.id for user, _ in results}) == 1
        assert [created for _, created in results].count(True) == 1
        assert [u.name for u in await gateway.search_users("dave")] == ["dave"]
