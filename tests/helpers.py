"""Shared test helpers."""

import base64

PHOTO_BYTES = b"\x89PNG\r\n\x1a\nnot-really-a-png"
PHOTO_B64 = base64.b64encode(PHOTO_BYTES).decode("ascii")


def auth_headers(user_id: int | str) -> dict[str, str]:
    """Authorization header carrying a user identifier as the bearer credential."""
    return {"Authorization": f"Bearer {user_id}"}
