"""ProjectService: submit, query, update and delete team projects."""

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import delete, or_, select, update

from projectdesk.db.base import Database
from projectdesk.db.models.project import PROJECT_STATUS_SUBMITTED, Project
from projectdesk.domain.identifiers import generate_project_id
from projectdesk.domain.results import FailureReason, ServiceResult
from projectdesk.domain.validation import clean_text, validate_new_project, validate_project_update
from projectdesk.schemas.projects import (
    DeletionSummary,
    ProjectRecord,
    ProjectSnapshot,
    ProjectSubmitRequest,
)
from projectdesk.services.user_directory import UserDirectory

logger = structlog.get_logger(__name__)


def _store_unavailable() -> ServiceResult:
    return ServiceResult.failure(
        FailureReason.STORE_UNAVAILABLE,
        "project store is not available",
        store_connected=False,
    )


def _project_not_found(project_id: str) -> ServiceResult:
    return ServiceResult.failure(
        FailureReason.NOT_FOUND,
        "project not found",
        details=[f"no project with id {project_id}"],
    )


class ProjectService:
    """Service layer for project records.

    Only the leader or the owner of a project may change it. Update and
    delete are single conditional statements, so a project removed between
    the lookup and the write surfaces as ``not_found`` rather than a silent
    no-op.
    """

    def __init__(self, database: Database, directory: UserDirectory | None = None):
        self.database = database
        self.directory = directory or UserDirectory(database)

    async def create(self, request: ProjectSubmitRequest) -> ServiceResult[ProjectRecord]:
        """Validate and store a new project submitted by ``request.owner_uuid``."""
        draft, errors = validate_new_project(
            name=request.name,
            group_name=request.group_name,
            people_count=request.people_count,
            owner_uuid=request.owner_uuid,
            submit_time=request.submit_time,
            members=request.members,
            leader_uuid=request.leader_uuid,
        )
        if draft is None:
            logger.info("project_create_invalid", errors=errors)
            return ServiceResult.failure(FailureReason.VALIDATION_ERROR, "project data is invalid", details=errors)

        if not await self.database.connect():
            return _store_unavailable()

        if not await self.directory.exists(draft.owner_uuid):
            logger.info("project_owner_missing", owner_uuid=draft.owner_uuid)
            return ServiceResult.failure(
                FailureReason.USER_NOT_FOUND,
                "user not found",
                details=[f"no user with uuid {draft.owner_uuid}"],
            )

        project = Project(
            project_id=generate_project_id(),
            name=draft.name,
            group_name=draft.group_name,
            people_count=draft.people_count,
            owner_uuid=draft.owner_uuid,
            leader_uuid=draft.leader_uuid,
            members=draft.members,
            status=PROJECT_STATUS_SUBMITTED,
            submit_time=draft.submit_time,
            created_at=datetime.now(UTC),
        )
        async with self.database.session_factory() as session:
            session.add(project)
            await session.commit()

        logger.info(
            "project_created",
            project_id=project.project_id,
            owner_uuid=project.owner_uuid,
            leader_uuid=project.leader_uuid,
            member_count=len(project.members),
        )
        return ServiceResult.success(ProjectRecord.from_model(project))

    async def query_by_leader(self, leader_uuid: Any) -> ServiceResult[list[ProjectRecord]]:
        """Return every project led by ``leader_uuid``, oldest first."""
        leader = clean_text(leader_uuid)
        if leader is None:
            return ServiceResult.failure(
                FailureReason.VALIDATION_ERROR,
                "leaderUuid is invalid",
                details=["leaderUuid must be a non-empty string"],
            )

        if not await self.database.connect():
            return _store_unavailable()

        async with self.database.session_factory() as session:
            result = await session.execute(
                select(Project)
                .where(Project.leader_uuid == leader)
                .order_by(Project.created_at.asc(), Project.project_id.asc())
            )
            projects = [ProjectRecord.from_model(p) for p in result.scalars().all()]

        logger.info("projects_queried", leader_uuid=leader, count=len(projects))
        return ServiceResult.success(projects)

    async def update(self, project_id: Any, requesting_uuid: Any, fields: Any) -> ServiceResult[ProjectRecord]:
        """Change name, groupName and/or peopleCount on behalf of ``requesting_uuid``."""
        changes, errors = validate_project_update(
            project_id=project_id,
            requesting_uuid=requesting_uuid,
            fields=fields,
        )
        if errors:
            logger.info("project_update_invalid", errors=errors)
            return ServiceResult.failure(FailureReason.VALIDATION_ERROR, "update data is invalid", details=errors)

        project_id = clean_text(project_id)
        requester = clean_text(requesting_uuid)

        if not await self.database.connect():
            return _store_unavailable()

        async with self.database.session_factory() as session:
            project = await session.get(Project, project_id)
            if project is None:
                return _project_not_found(project_id)

            if requester not in (project.leader_uuid, project.owner_uuid):
                logger.warning(
                    "project_update_forbidden",
                    project_id=project_id,
                    requesting_uuid=requester,
                )
                return ServiceResult.failure(
                    FailureReason.FORBIDDEN,
                    "only the project leader or owner may update it",
                    details=[f"user {requester} is neither leader nor owner of {project_id}"],
                )

            result = await session.execute(
                update(Project)
                .where(
                    Project.project_id == project_id,
                    or_(Project.leader_uuid == requester, Project.owner_uuid == requester),
                )
                .values(**changes, updated_at=datetime.now(UTC))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await session.rollback()
                logger.warning("project_update_lost_race", project_id=project_id)
                return _project_not_found(project_id)

            await session.commit()
            await session.refresh(project)

        logger.info("project_updated", project_id=project_id, fields=sorted(changes))
        return ServiceResult.success(ProjectRecord.from_model(project))

    async def delete(self, project_id: Any) -> ServiceResult[DeletionSummary]:
        """Hard-delete a project and return a snapshot of what was removed."""
        project_id = clean_text(project_id)
        if project_id is None:
            return ServiceResult.failure(
                FailureReason.VALIDATION_ERROR,
                "projectId is invalid",
                details=["projectId must be a non-empty string"],
            )

        if not await self.database.connect():
            return _store_unavailable()

        async with self.database.session_factory() as session:
            project = await session.get(Project, project_id)
            if project is None:
                return _project_not_found(project_id)

            snapshot = ProjectSnapshot(
                name=project.name,
                group_name=project.group_name,
                people_count=project.people_count,
                leader_uuid=project.leader_uuid,
            )
            result = await session.execute(
                delete(Project)
                .where(Project.project_id == project_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await session.rollback()
                return _project_not_found(project_id)
            await session.commit()

        logger.info("project_deleted", project_id=project_id)
        return ServiceResult.success(DeletionSummary(project_id=project_id, deleted=True, snapshot=snapshot))
