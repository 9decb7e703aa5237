from abc import ABC, abstractmethod

from .dto import *

class UserInterface(ABC):
    @abstractmethod
    async def register_or_login(
            self,
            name: str
    ) -> tuple[UserDTO, bool]:
        """
        Returns the user with this username, creating it with the default photo if unseen.
        :param name:
        :return: (user, created)
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_user_by_id(
            self,
            user_id: int
    ) -> UserDTO:
        """
        Get user by User.id
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_user_by_name(
            self,
            name: str
    ) -> UserDTO:
        """
        Get user by User.name
        :param name:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def search_users(
            self,
            query: str
    ) -> list[UserDTO]:
        """
        Case-sensitive substring search over usernames, alphabetical, capped.
        :param query:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def rename_user(
            self,
            user_id: int,
            new_name: str
    ) -> UserDTO:
        """
        Changes the username.
        :param user_id:
        :param new_name:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def set_user_photo(
            self,
            user_id: int,
            photo: str
    ) -> UserDTO:
        """
        Replaces the profile photo.
        :param user_id:
        :param photo: base64 encoded image
        :return:
        """
        raise NotImplementedError()


class ConversationInterface(ABC):
    @abstractmethod
    async def start_direct(
            self,
            initiator_id: int,
            recipient_name: str
    ) -> ConversationDTO:
        """
        Returns the direct conversation between two users, creating it if needed.
        :param initiator_id:
        :param recipient_name:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def create_group(
            self,
            creator_id: int,
            name: str
    ) -> ConversationDTO:
        """
        Creates a group with the creator as the only participant.
        :param creator_id:
        :param name:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_conversation(
            self,
            conversation_id: int,
            user_id: int
    ) -> ConversationDTO:
        """
        Gets a hydrated conversation for one of its participants.
        :param conversation_id:
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_group(
            self,
            conversation_id: int,
            user_id: int
    ) -> ConversationDTO:
        """
        Same as get_conversation, restricted to groups.
        :param conversation_id:
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def list_conversations(
            self,
            user_id: int
    ) -> list[ConversationSummaryDTO]:
        """
        Gets the user's conversations, most recently active first.
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def rename_group(
            self,
            conversation_id: int,
            name: str,
            actor_id: int | None = None
    ) -> ConversationDTO:
        """
        Sets a group's name.
        :param conversation_id:
        :param name:
        :param actor_id: when given, must be a participant
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def set_group_photo(
            self,
            conversation_id: int,
            photo: str,
            actor_id: int | None = None
    ) -> ConversationDTO:
        """
        Sets a group's photo.
        :param conversation_id:
        :param photo: base64 encoded image
        :param actor_id: when given, must be a participant
        :return:
        """
        raise NotImplementedError()


class MembershipInterface(ABC):
    @abstractmethod
    async def add_members(
            self,
            conversation_id: int,
            names: list[str],
            actor_id: int | None = None
    ) -> ConversationDTO:
        """
        Adds users to a group by username. Unknown usernames are skipped.
        :param conversation_id:
        :param names:
        :param actor_id: when given, must be a participant
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def remove_member(
            self,
            conversation_id: int,
            user_id: int
    ) -> None:
        """
        Removes a user from a group.
        :param conversation_id:
        :param user_id:
        :return:
        """
        raise NotImplementedError()


class MessageInterface(ABC):
    @abstractmethod
    async def send_message(
            self,
            conversation_id: int,
            sender_id: int,
            kind: MessageKind | str,
            text: str | None = None,
            photo: str | None = None
    ) -> MessageDTO:
        """
        Appends a message to a conversation.
        :param conversation_id:
        :param sender_id:
        :param kind: "text" or "photo"
        :param text: required for text messages
        :param photo: base64 encoded image, required for photo messages
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def forward_message(
            self,
            message_id: int,
            target_conversation_id: int,
            actor_id: int
    ) -> MessageDTO:
        """
        Copies a message into another conversation as a new message owned by the actor.
        :param message_id:
        :param target_conversation_id:
        :param actor_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def delete_message(
            self,
            message_id: int,
            conversation_id: int,
            actor_id: int
    ) -> None:
        """
        Deletes a message and its comments. Only the sender may do this.
        :param message_id:
        :param conversation_id:
        :param actor_id:
        :return:
        """
        raise NotImplementedError()


class CommentInterface(ABC):
    @abstractmethod
    async def add_comment(
            self,
            message_id: int,
            conversation_id: int,
            author_id: int,
            text: str
    ) -> CommentDTO:
        """
        Comments on a message.
        :param message_id:
        :param conversation_id:
        :param author_id:
        :param text:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def remove_comments(
            self,
            message_id: int,
            conversation_id: int,
            actor_id: int
    ) -> int:
        """
        Deletes every comment the actor left on a message.
        :param message_id:
        :param conversation_id:
        :param actor_id:
        :return: number of deleted comments
        """
        raise NotImplementedError()

    @abstractmethod
    async def list_comments(
            self,
            message_id: int,
            conversation_id: int | None = None,
            actor_id: int | None = None
    ) -> list[CommentDTO]:
        """
        Gets a message's comments, oldest first.
        :param message_id:
        :param conversation_id: when given, must be the message's conversation
        :param actor_id: when given, must be a participant
        :return:
        """
        raise NotImplementedError()
