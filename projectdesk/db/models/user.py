"""User model: one row per WeChat openid."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from projectdesk.db.base import Base
from projectdesk.domain.profile import DEFAULT_USERNAME, Gender
from projectdesk.domain.validation import MAX_TEXT_LENGTH, MAX_UUID_LENGTH


class User(Base):
    __tablename__ = "users"

    uuid = Column(String(MAX_UUID_LENGTH), primary_key=True)
    external_id = Column(String(128), nullable=False, unique=True, index=True)

    username = Column(String(MAX_TEXT_LENGTH), nullable=False, default=DEFAULT_USERNAME)
    gender = Column(String(16), nullable=False, default=Gender.UNSPECIFIED.value)
    avatar_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
