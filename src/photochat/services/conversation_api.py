from fastapi import status, Depends, APIRouter
from fastapi.security import HTTPAuthorizationCredentials

from dishka import FromDishka
from dishka.integrations.fastapi import inject

import logging

from photochat.core.gateways import ConversationGateway, MembershipGateway
from .auth_api import AuthAPI

from .models.conversation_api_models import *


class ConversationAPI:
    """
    Conversation and group endpoints.

    Direct and group conversations share one id space; /groups routes only
    accept group ids and answer 404 for direct ones.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for bearer resolution
        conversation_router: FastAPI router containing conversation endpoints
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ):
        self.logger = logger
        self.auth_api = auth_api

        self._conversation_router = APIRouter(tags=["Conversations"])
        self._register_endpoints()

    @property
    def conversation_router(self) -> APIRouter:
        return self._conversation_router

    def get_router(self) -> APIRouter:
        return self._conversation_router

    def _register_endpoints(self):
        @self.conversation_router.get("/conversations", response_model=list[ConversationSummaryResponse])
        @inject
        async def get_my_conversations(
                conversation_gateway: FromDishka[ConversationGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            List the caller's conversations, most recently active first.
            """
            user_id = await self.auth_api.get_current_user(credentials)

            summaries = await conversation_gateway.list_conversations(user_id)
            return [ConversationSummaryResponse.from_dto(summary) for summary in summaries]

        @self.conversation_router.post(
            "/conversations",
            response_model=ConversationResponse,
            status_code=status.HTTP_201_CREATED
        )
        @inject
        async def start_conversation(
                request_data: StartConversationRequest,
                conversation_gateway: FromDishka[ConversationGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            Start (or reopen) the direct conversation with another user.

            Calling it again for the same pair, in either direction, returns the same conversation.
            """
            user_id = await self.auth_api.get_current_user(credentials)

            conversation = await conversation_gateway.start_direct(user_id, request_data.username)
            return ConversationResponse.from_dto(conversation)

        @self.conversation_router.get("/conversations/{conversation_id}", response_model=ConversationResponse)
        @inject
        async def get_conversation(
                conversation_id: int,
                conversation_gateway: FromDishka[ConversationGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            conversation = await conversation_gateway.get_conversation(conversation_id, user_id)
            return ConversationResponse.from_dto(conversation)

        @self.conversation_router.post(
            "/groups",
            response_model=ConversationResponse,
            status_code=status.HTTP_201_CREATED
        )
        @inject
        async def create_group(
                request_data: CreateGroupRequest,
                conversation_gateway: FromDishka[ConversationGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            group = await conversation_gateway.create_group(user_id, request_data.name)
            self.logger.info("Group %s created by user %s", group.id, user_id)
            return ConversationResponse.from_dto(group)

        @self.conversation_router.get("/groups/{group_id}", response_model=ConversationResponse)
        @inject
        async def get_group(
                group_id: int,
                conversation_gateway: FromDishka[ConversationGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            group = await conversation_gateway.get_group(group_id, user_id)
            return ConversationResponse.from_dto(group)

        @self.conversation_router.put("/groups/{group_id}/name", response_model=ConversationResponse)
        @inject
        async def set_group_name(
                group_id: int,
                request_data: GroupNameRequest,
                conversation_gateway: FromDishka[ConversationGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            group = await conversation_gateway.rename_group(group_id, request_data.name, actor_id=user_id)
            return ConversationResponse.from_dto(group)

        @self.conversation_router.put("/groups/{group_id}/photo", response_model=ConversationResponse)
        @inject
        async def set_group_photo(
                group_id: int,
                request_data: GroupPhotoRequest,
                conversation_gateway: FromDishka[ConversationGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            group = await conversation_gateway.set_group_photo(group_id, request_data.photo, actor_id=user_id)
            return ConversationResponse.from_dto(group)

        @self.conversation_router.post("/groups/{group_id}/members", response_model=ConversationResponse)
        @inject
        async def add_to_group(
                group_id: int,
                request_data: AddMembersRequest,
                membership_gateway: FromDishka[MembershipGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            Add users to a group by username. Unknown usernames are ignored.
            """
            user_id = await self.auth_api.get_current_user(credentials)

            group = await membership_gateway.add_members(group_id, request_data.members, actor_id=user_id)
            return ConversationResponse.from_dto(group)

        @self.conversation_router.delete("/groups/{group_id}/members", status_code=status.HTTP_204_NO_CONTENT)
        @inject
        async def leave_group(
                group_id: int,
                membership_gateway: FromDishka[MembershipGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            await membership_gateway.remove_member(group_id, user_id)
            self.logger.info("User %s left group %s", user_id, group_id)
