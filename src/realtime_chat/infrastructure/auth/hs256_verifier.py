from __future__ import annotations

from uuid import UUID

import jwt

from realtime_chat.application.dto.principal import Principal


class HS256Verifier:
    """Verify session JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        # Tokens minted by the auth service carry the id as userId.
        subject = payload.get("sub") or payload.get("userId")
        if not subject:
            raise jwt.InvalidTokenError("Token has no subject")
        try:
            user_id = UUID(str(subject))
        except ValueError as exc:
            raise jwt.InvalidTokenError("Token subject is not a valid user id") from exc
        return Principal(user_id=user_id)
