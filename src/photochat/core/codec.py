import base64
import binascii

from .exceptions import ValidationError


def decode_photo(photo: str | None) -> bytes:
    """
    Decodes a base64 photo payload.
    :param photo: base64 (standard alphabet) string
    :return: raw image bytes
    :raises ValidationError: if the payload is empty or not valid base64
    """
    if not photo:
        raise ValidationError("Photo payload is required")
    try:
        data = base64.b64decode(photo, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid base64 photo data") from e
    if not data:
        raise ValidationError("Photo payload is required")
    return data


def encode_photo(photo: bytes | None) -> str | None:
    if photo is None:
        return None
    return base64.b64encode(photo).decode("ascii")
