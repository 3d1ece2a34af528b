"""Project routes: submit, query by leader, update, delete."""

from fastapi import APIRouter, Depends

from projectdesk.api.deps import get_project_service
from projectdesk.api.errors import raise_for_failure, require_fields
from projectdesk.schemas.projects import (
    DeletionSummary,
    ProjectDeleteRequest,
    ProjectQueryRequest,
    ProjectQueryResponse,
    ProjectRecord,
    ProjectSubmitRequest,
    ProjectUpdateRequest,
)
from projectdesk.services.project_service import ProjectService

router = APIRouter()


@router.post("", response_model=ProjectRecord, status_code=201)
async def submit_project(body: ProjectSubmitRequest, service: ProjectService = Depends(get_project_service)):
    """Submit a new project.

    Raises:
        HTTPException(400): Missing or invalid fields, or unknown owner
        HTTPException(503): Store not available
    """
    require_fields(body, "owner_uuid", "name", "people_count", "group_name", "submit_time")
    result = await service.create(body)
    raise_for_failure(result)
    return result.data


@router.post("/query", response_model=ProjectQueryResponse)
async def query_projects(body: ProjectQueryRequest, service: ProjectService = Depends(get_project_service)):
    """List the projects led by ``leaderUuid``."""
    require_fields(body, "leader_uuid")
    result = await service.query_by_leader(body.leader_uuid)
    raise_for_failure(result)
    return ProjectQueryResponse(
        leader_uuid=body.leader_uuid.strip(),
        count=len(result.data),
        projects=result.data,
    )


@router.post("/update", response_model=ProjectRecord)
async def update_project(body: ProjectUpdateRequest, service: ProjectService = Depends(get_project_service)):
    """Update name, groupName or peopleCount.

    Raises:
        HTTPException(400): Missing fields or nothing valid to update
        HTTPException(403): Requester is neither leader nor owner
        HTTPException(404): Project not found
    """
    require_fields(body, "project_id", "requesting_uuid", "fields")
    result = await service.update(body.project_id, body.requesting_uuid, body.fields)
    raise_for_failure(result)
    return result.data


@router.post("/delete", response_model=DeletionSummary)
async def delete_project(body: ProjectDeleteRequest, service: ProjectService = Depends(get_project_service)):
    """Delete a project and return a summary of what was removed."""
    require_fields(body, "project_id")
    result = await service.delete(body.project_id)
    raise_for_failure(result)
    return result.data
