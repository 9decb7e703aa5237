from pydantic import BaseModel

from photochat.core.codec import encode_photo
from photochat.core.dto import UserDTO


class UsernameUpdateRequest(BaseModel):
    username: str

class PhotoUpdateRequest(BaseModel):
    photo: str  # base64

class UserResponse(BaseModel):
    id: int
    username: str
    photo: str

    @classmethod
    def from_dto(cls, user: UserDTO) -> "UserResponse":
        return cls(id=user.id, username=user.name, photo=encode_photo(user.photo))
