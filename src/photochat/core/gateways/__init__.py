from .users import UserGateway
from .conversations import ConversationGateway
from .members import MembershipGateway
from .messages import MessageGateway
from .comments import CommentGateway

__all__ = [
    "UserGateway",
    "ConversationGateway",
    "MembershipGateway",
    "MessageGateway",
    "CommentGateway",
]
