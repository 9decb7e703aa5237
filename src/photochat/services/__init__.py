from .auth_api import AuthAPI
from .user_api import UserAPI
from .conversation_api import ConversationAPI
from .message_api import MessageAPI
from .health_api import HealthAPI

__all__ = ["AuthAPI", "UserAPI", "ConversationAPI", "MessageAPI", "HealthAPI"]
