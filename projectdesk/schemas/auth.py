"""Login request and response schemas."""

from datetime import datetime

from projectdesk.db.models.user import User
from projectdesk.schemas.base import CamelModel, as_utc


class LoginRequest(CamelModel):
    code: str | None = None
    nick_name: str | None = None
    avatar_url: str | None = None
    gender: int | None = None


class LoginProfile(CamelModel):
    """Optional profile the mini-program forwards from wx.getUserProfile."""

    nick_name: str | None = None
    avatar_url: str | None = None
    gender: int | None = None


class UserRecord(CamelModel):
    uuid: str
    username: str
    gender: str
    external_id: str
    avatar_url: str | None = None
    created_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserRecord":
        return cls(
            uuid=user.uuid,
            username=user.username,
            gender=user.gender,
            external_id=user.external_id,
            avatar_url=user.avatar_url,
            created_at=as_utc(user.created_at),
        )


class LoginPayload(CamelModel):
    token: str
    user: UserRecord
    is_new_user: bool
    login_time: datetime
    degraded: bool = False
