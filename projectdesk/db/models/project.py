"""Project model: team submissions owned and led by users."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from projectdesk.db.base import Base
from projectdesk.domain.validation import MAX_TEXT_LENGTH, MAX_UUID_LENGTH

PROJECT_STATUS_SUBMITTED = "submitted"


class Project(Base):
    __tablename__ = "projects"

    project_id = Column(String(MAX_UUID_LENGTH), primary_key=True)

    name = Column(String(MAX_TEXT_LENGTH), nullable=False)
    group_name = Column(String(MAX_TEXT_LENGTH), nullable=False)
    people_count = Column(Integer, nullable=False)

    owner_uuid = Column(String(MAX_UUID_LENGTH), nullable=False, index=True)
    leader_uuid = Column(String(MAX_UUID_LENGTH), nullable=False, index=True)
    members = Column(JSON, nullable=False, default=list)

    status = Column(String(32), nullable=False, default=PROJECT_STATUS_SUBMITTED)
    submit_time = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True)
