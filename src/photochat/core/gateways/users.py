import logging
import re

from sqlalchemy import select, insert, update
from sqlalchemy.exc import IntegrityError

from photochat.config import LimitsConfig
from ..codec import decode_photo
from ..database import User
from ..db_manager import DatabaseManager
from ..dto import UserDTO
from ..exceptions import Conflict, NotFound, ValidationError
from ..interfaces import UserInterface
from .base import BaseGateway, storage_errors

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 25
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_username(name: str) -> str:
    if name is None or not (USERNAME_MIN_LENGTH <= len(name) <= USERNAME_MAX_LENGTH):
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if not USERNAME_PATTERN.match(name):
        raise ValidationError("Username can only contain letters, numbers, _ and -")
    return name


def _to_dto(user: User) -> UserDTO:
    return UserDTO(id=user.id, name=user.name, photo=user.photo)


class UserGateway(BaseGateway, UserInterface):
    """Identity directory: user records and username uniqueness."""

    __slots__ = ("_default_photo",)

    def __init__(
            self,
            db_manager: DatabaseManager,
            default_photo: bytes,
            logger: logging.Logger | None = None,
            limits: LimitsConfig | None = None
    ):
        super().__init__(db_manager, logger, limits)
        self._default_photo = default_photo

    async def _login(self, name: str) -> tuple[UserDTO, bool]:
        async with self._db_manager.session() as session:
            result = await session.execute(select(User).where(User.name == name))
            user = result.scalars().first()
            if user:
                return _to_dto(user), False

            stmt = insert(User).values(name=name, photo=self._default_photo).returning(User)
            result = await session.execute(stmt)
            return _to_dto(result.scalars().first()), True

    @storage_errors("registering or logging in user")
    async def register_or_login(self, name: str) -> tuple[UserDTO, bool]:
        validate_username(name)
        try:
            return await self._login(name)
        except IntegrityError:
            # lost a race with a concurrent registration of the same name
            return await self._login(name)

    @storage_errors("getting user by id")
    async def get_user_by_id(self, user_id: int) -> UserDTO:
        async with self._db_manager.session() as session:
            result = await session.execute(select(User).where(User.id == user_id))
            user = result.scalars().first()
            if user is None:
                raise NotFound("User not found")
            return _to_dto(user)

    @storage_errors("getting user by name")
    async def get_user_by_name(self, name: str) -> UserDTO:
        async with self._db_manager.session() as session:
            result = await session.execute(select(User).where(User.name == name))
            user = result.scalars().first()
            if user is None:
                raise NotFound("User not found")
            return _to_dto(user)

    @storage_errors("searching users")
    async def search_users(self, query: str) -> list[UserDTO]:
        async with self._db_manager.session() as session:
            stmt = select(User).order_by(User.name).limit(self._limits.search)
            if query:
                # LIKE is case-sensitive on SQLite too, see db_manager
                stmt = stmt.where(User.name.contains(query, autoescape=True))
            result = await session.execute(stmt)
            return [_to_dto(user) for user in result.scalars().all()]

    @storage_errors("renaming user")
    async def rename_user(self, user_id: int, new_name: str) -> UserDTO:
        validate_username(new_name)
        try:
            async with self._db_manager.session() as session:
                result = await session.execute(select(User.id).where(User.name == new_name))
                existing_id = result.scalar_one_or_none()
                if existing_id is not None and existing_id != user_id:
                    raise Conflict("Username already taken")

                stmt = update(User).where(User.id == user_id).values(name=new_name).returning(User)
                result = await session.execute(stmt)
                user = result.scalars().first()
                if user is None:
                    raise NotFound("User not found")
                return _to_dto(user)
        except IntegrityError as e:
            raise Conflict("Username already taken") from e

    @storage_errors("updating user photo")
    async def set_user_photo(self, user_id: int, photo: str) -> UserDTO:
        data = decode_photo(photo)
        async with self._db_manager.session() as session:
            stmt = update(User).where(User.id == user_id).values(photo=data).returning(User)
            result = await session.execute(stmt)
            user = result.scalars().first()
            if user is None:
                raise NotFound("User not found")
            return _to_dto(user)
