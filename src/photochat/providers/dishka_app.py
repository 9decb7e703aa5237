from collections.abc import AsyncIterable

from dishka import Provider, Scope, provide
import logging

from photochat.config import Config, load_config
from photochat.core.db_manager import DatabaseManager
from photochat.core.gateways import (
    UserGateway,
    ConversationGateway,
    MembershipGateway,
    MessageGateway,
    CommentGateway,
)
from photochat.services import AuthAPI, UserAPI, ConversationAPI, MessageAPI, HealthAPI

class AdaptersProvider(Provider):
    def __init__(self, config: Config | None = None):
        super().__init__()
        self._config = config

    @provide(scope=Scope.APP)
    def get_config(self) -> Config:
        return self._config or load_config(".env")

    @provide(scope=Scope.APP)
    def get_logger(self) -> logging.Logger:
        return logging.getLogger("photochat")

    @provide(scope=Scope.APP)
    async def get_db_manager(self, config: Config, logger: logging.Logger) -> AsyncIterable[DatabaseManager]:
        db_manager = DatabaseManager(config, logger)
        await db_manager.initialize()
        await db_manager.create_tables()
        yield db_manager
        await db_manager.dispose()

class GatewaysProvider(Provider):
    @provide(scope=Scope.REQUEST)
    def get_user_gateway(
            self,
            db_manager: DatabaseManager,
            config: Config,
            logger: logging.Logger
    ) -> UserGateway:
        return UserGateway(db_manager, config.app.default_photo, logger, config.limits)

    @provide(scope=Scope.REQUEST)
    def get_conversation_gateway(
            self,
            db_manager: DatabaseManager,
            config: Config,
            logger: logging.Logger
    ) -> ConversationGateway:
        return ConversationGateway(db_manager, logger, config.limits)

    @provide(scope=Scope.REQUEST)
    def get_membership_gateway(
            self,
            db_manager: DatabaseManager,
            config: Config,
            logger: logging.Logger
    ) -> MembershipGateway:
        return MembershipGateway(db_manager, logger, config.limits)

    @provide(scope=Scope.REQUEST)
    def get_message_gateway(
            self,
            db_manager: DatabaseManager,
            config: Config,
            logger: logging.Logger
    ) -> MessageGateway:
        return MessageGateway(db_manager, logger, config.limits)

    @provide(scope=Scope.REQUEST)
    def get_comment_gateway(
            self,
            db_manager: DatabaseManager,
            config: Config,
            logger: logging.Logger
    ) -> CommentGateway:
        return CommentGateway(db_manager, logger, config.limits)

class ServicesProvider(Provider):
    @provide(scope=Scope.APP)
    def get_auth_api(
        self,
        db_manager: DatabaseManager,
        config: Config,
        logger: logging.Logger
    ) -> AuthAPI:
        return AuthAPI(
            db_manager=db_manager,
            config=config,
            logger=logger
        )

    @provide(scope=Scope.APP)
    def get_user_api(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> UserAPI:
        return UserAPI(
            logger=logger,
            auth_api=auth_api
        )

    @provide(scope=Scope.APP)
    def get_conversation_api(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> ConversationAPI:
        return ConversationAPI(
            logger=logger,
            auth_api=auth_api
        )

    @provide(scope=Scope.APP)
    def get_message_api(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> MessageAPI:
        return MessageAPI(
            logger=logger,
            auth_api=auth_api
        )

    @provide(scope=Scope.APP)
    def get_health_api(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> HealthAPI:
        return HealthAPI(
            db_manager=db_manager,
            logger=logger
        )
