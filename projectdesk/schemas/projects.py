"""Project request and response schemas.

Request models accept any JSON value per field; type and range rules live in
``projectdesk.domain.validation`` so that every violation is reported at once.
"""

from datetime import datetime
from typing import Any

from projectdesk.db.models.project import Project
from projectdesk.schemas.base import CamelModel, as_utc


class ProjectSubmitRequest(CamelModel):
    owner_uuid: Any = None
    name: Any = None
    people_count: Any = None
    group_name: Any = None
    submit_time: Any = None
    members: Any = None
    leader_uuid: Any = None


class ProjectQueryRequest(CamelModel):
    leader_uuid: Any = None


class ProjectUpdateRequest(CamelModel):
    project_id: Any = None
    requesting_uuid: Any = None
    fields: Any = None


class ProjectDeleteRequest(CamelModel):
    project_id: Any = None


class ProjectRecord(CamelModel):
    project_id: str
    name: str
    group_name: str
    people_count: int
    owner_uuid: str
    members: list[str]
    leader_uuid: str
    submit_time: datetime
    created_at: datetime
    updated_at: datetime | None = None
    status: str

    @classmethod
    def from_model(cls, project: Project) -> "ProjectRecord":
        return cls(
            project_id=project.project_id,
            name=project.name,
            group_name=project.group_name,
            people_count=project.people_count,
            owner_uuid=project.owner_uuid,
            members=list(project.members or []),
            leader_uuid=project.leader_uuid,
            submit_time=as_utc(project.submit_time),
            created_at=as_utc(project.created_at),
            updated_at=as_utc(project.updated_at),
            status=project.status,
        )


class ProjectQueryResponse(CamelModel):
    leader_uuid: str
    count: int
    projects: list[ProjectRecord]


class ProjectSnapshot(CamelModel):
    name: str
    group_name: str
    people_count: int
    leader_uuid: str


class DeletionSummary(CamelModel):
    project_id: str
    deleted: bool = True
    snapshot: ProjectSnapshot
