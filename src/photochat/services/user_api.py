from fastapi import Depends, APIRouter
from fastapi.security import HTTPAuthorizationCredentials

from dishka import FromDishka
from dishka.integrations.fastapi import inject

import logging

from photochat.core.gateways import UserGateway
from .auth_api import AuthAPI

from .models.user_api_models import *

class UserAPI:
    """
    User discovery and profile endpoints.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for bearer resolution
        user_router: FastAPI router containing user endpoints
    """
    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ):
        self.logger = logger
        self.auth_api = auth_api

        self._user_router = APIRouter(tags=["Users"])

        self._register_endpoints()

    @property
    def user_router(self) -> APIRouter:
        return self._user_router

    def get_router(self) -> APIRouter:
        return self._user_router

    def _register_endpoints(self):
        @self.user_router.get("/users", response_model=list[UserResponse])
        @inject
        async def search_users(
                user_gateway: FromDishka[UserGateway],
                username: str = "",
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            Search users by username substring (case-sensitive). An empty query lists everyone.
            """
            await self.auth_api.get_current_user(credentials)

            users = await user_gateway.search_users(username)
            return [UserResponse.from_dto(user) for user in users]

        @self.user_router.put("/users/me/username", response_model=UserResponse)
        @inject
        async def set_my_username(
                request_data: UsernameUpdateRequest,
                user_gateway: FromDishka[UserGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            Change the caller's username.

            Raises:
                Conflict: If the username belongs to another user
            """
            user_id = await self.auth_api.get_current_user(credentials)

            user = await user_gateway.rename_user(user_id, request_data.username)
            self.logger.info("User %s renamed to %s", user_id, user.name)
            return UserResponse.from_dto(user)

        @self.user_router.put("/users/me/photo", response_model=UserResponse)
        @inject
        async def set_my_photo(
                request_data: PhotoUpdateRequest,
                user_gateway: FromDishka[UserGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            user = await user_gateway.set_user_photo(user_id, request_data.photo)
            return UserResponse.from_dto(user)
