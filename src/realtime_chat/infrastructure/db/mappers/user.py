from __future__ import annotations

from realtime_chat.domain.entities.user import User
from realtime_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        full_name=model.full_name,
        profile_pic=model.profile_pic,
        last_seen_at=model.last_seen_at,
    )
