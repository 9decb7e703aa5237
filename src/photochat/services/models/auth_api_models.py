from pydantic import BaseModel

from photochat.core.codec import encode_photo
from photochat.core.dto import UserDTO


class LoginRequest(BaseModel):
    # format rules are enforced by the user gateway
    username: str

class LoginResponse(BaseModel):
    identifier: str  # goes into "Authorization: Bearer <identifier>"
    username: str
    photo: str

    @classmethod
    def from_dto(cls, user: UserDTO) -> "LoginResponse":
        return cls(identifier=str(user.id), username=user.name, photo=encode_photo(user.photo))
