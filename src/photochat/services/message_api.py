from fastapi import status, Depends, APIRouter
from fastapi.security import HTTPAuthorizationCredentials
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from photochat.core.gateways import CommentGateway, MessageGateway
from .auth_api import AuthAPI

from .models.message_api_models import *


class MessageAPI:
    """
    Message and comment endpoints.

    Handles sending, forwarding and deleting messages, and commenting on them.
    Every handler resolves the caller first; participation and ownership are
    checked by the gateways.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for bearer resolution
        message_router: FastAPI router containing message endpoints
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ):

        self.logger = logger
        self.auth_api = auth_api
        self._message_router = APIRouter(tags=["Messages"])
        self._register_endpoints()

    @property
    def message_router(self) -> APIRouter:
        return self._message_router

    def get_router(self) -> APIRouter:
        return self._message_router

    def _register_endpoints(self):
        @self.message_router.post(
            "/conversations/{conversation_id}/messages",
            response_model=MessageResponse,
            status_code=status.HTTP_201_CREATED
        )
        @inject
        async def send_message(
                conversation_id: int,
                message_data: MessageSendRequest,
                message_gateway: FromDishka[MessageGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            Send a text or photo message.

            Args:
                conversation_id: Target conversation
                message_data: Type plus exactly one of text / base64 photo
                message_gateway: Message persistence interface
                credentials: Bearer credential

            Returns:
                The created message
            """
            sender_id = await self.auth_api.get_current_user(credentials)

            message = await message_gateway.send_message(
                conversation_id=conversation_id,
                sender_id=sender_id,
                kind=message_data.type,
                text=message_data.text,
                photo=message_data.photo
            )

            return MessageResponse.from_dto(message)

        @self.message_router.post(
            "/conversations/{conversation_id}/messages/{message_id}/forward",
            response_model=MessageResponse,
            status_code=status.HTTP_201_CREATED
        )
        @inject
        async def forward_message(
                conversation_id: int,
                message_id: int,
                forward_data: ForwardRequest,
                message_gateway: FromDishka[MessageGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            Copy a message into another conversation.

            Only membership of the destination conversation is required; the
            source conversation id in the path is informational.
            """
            user_id = await self.auth_api.get_current_user(credentials)

            message = await message_gateway.forward_message(
                message_id,
                forward_data.conversation_id,
                user_id
            )
            self.logger.info(
                "Message %s forwarded to conversation %s by user %s",
                message_id, forward_data.conversation_id, user_id
            )
            return MessageResponse.from_dto(message)

        @self.message_router.delete(
            "/conversations/{conversation_id}/messages/{message_id}",
            status_code=status.HTTP_204_NO_CONTENT
        )
        @inject
        async def delete_message(
                conversation_id: int,
                message_id: int,
                message_gateway: FromDishka[MessageGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            await message_gateway.delete_message(message_id, conversation_id, user_id)

        @self.message_router.post(
            "/conversations/{conversation_id}/messages/{message_id}/comments",
            response_model=CommentResponse,
            status_code=status.HTTP_201_CREATED
        )
        @inject
        async def comment_message(
                conversation_id: int,
                message_id: int,
                comment_data: CommentRequest,
                comment_gateway: FromDishka[CommentGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            comment = await comment_gateway.add_comment(message_id, conversation_id, user_id, comment_data.text)
            return CommentResponse.from_dto(comment)

        @self.message_router.delete(
            "/conversations/{conversation_id}/messages/{message_id}/comments",
            status_code=status.HTTP_204_NO_CONTENT
        )
        @inject
        async def uncomment_message(
                conversation_id: int,
                message_id: int,
                comment_gateway: FromDishka[CommentGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            """
            Remove the caller's comments from a message.
            """
            user_id = await self.auth_api.get_current_user(credentials)

            removed = await comment_gateway.remove_comments(message_id, conversation_id, user_id)
            self.logger.info("Removed %s comment(s) of user %s on message %s", removed, user_id, message_id)

        @self.message_router.get(
            "/conversations/{conversation_id}/messages/{message_id}/comments",
            response_model=list[CommentResponse]
        )
        @inject
        async def get_comments(
                conversation_id: int,
                message_id: int,
                comment_gateway: FromDishka[CommentGateway],
                credentials: HTTPAuthorizationCredentials | None = Depends(self.auth_api.bearer_scheme)
        ):
            user_id = await self.auth_api.get_current_user(credentials)

            comments = await comment_gateway.list_comments(
                message_id,
                conversation_id=conversation_id,
                actor_id=user_id
            )
            return [CommentResponse.from_dto(comment) for comment in comments]
