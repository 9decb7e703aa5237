from fastapi import status, HTTPException, Depends, APIRouter, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from photochat.config import Config
from photochat.core.db_manager import DatabaseManager
from photochat.core.exceptions import NotFound
from photochat.core.gateways import UserGateway

from .models.auth_api_models import *


class AuthAPI:
    """
    Login and bearer resolution.

    The bearer credential is the numeric user identifier handed out by /session.
    It is not signed; it only has to name an existing user.
    """
    def __init__(
            self,
            db_manager: DatabaseManager,
            config: Config,
            logger: logging.Logger | None = None
    ):
        """
        Args:
            db_manager: Database manager instance
            config: Application config, provides the default profile photo
            logger: Custom logger instance (optional)
        """
        self.logger = logger or logging.getLogger(__name__)

        self.user_gateway = UserGateway(
            db_manager,
            config.app.default_photo,
            logger=self.logger,
            limits=config.limits
        )

        self.bearer_scheme = HTTPBearer(auto_error=False)

        self._auth_router = APIRouter(tags=["Authentication"])
        self._register_endpoints()

    @property
    def auth_router(self) -> APIRouter:
        return self._auth_router

    def get_router(self) -> APIRouter:
        return self._auth_router

    async def get_current_user(self, credentials: HTTPAuthorizationCredentials | None) -> int:
        """
        Resolve the acting user id from the Authorization header
        Args: credentials: parsed "Bearer <id>" header, None when absent
        Returns: int: id of an existing user
        """
        if credentials is None or credentials.scheme.lower() != "bearer":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authorization header required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        try:
            user_id = int(credentials.credentials)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid user identifier",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

        try:
            await self.user_gateway.get_user_by_id(user_id)
        except NotFound as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unknown user identifier",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e
        return user_id

    def _register_endpoints(self):
        @self.auth_router.post("/session", response_model=LoginResponse)
        async def do_login(login_data: LoginRequest, response: Response):
            """
            Log in, registering the user on first sight.

            Returns 201 for a new user and 200 for an existing one.
            """
            user, created = await self.user_gateway.register_or_login(login_data.username)

            if created:
                self.logger.info("New user registered: %s", user.id)
                response.status_code = status.HTTP_201_CREATED
            else:
                self.logger.info("Existing user logged in: %s", user.id)
                response.status_code = status.HTTP_200_OK

            return LoginResponse.from_dto(user)
