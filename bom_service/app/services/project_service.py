"""Project service for business logic"""

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from ..core.settings import get_settings
from ..models.project import Project
from ..repository.project_repository import ProjectRepository
from ..schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from ..utils.logging import setup_bom_logging as setup_logging
from .transaction import transaction

logger = setup_logging("project_service", log_level=get_settings().LOG_LEVEL)

PROJECT_EXISTS = "You already have a project with this name"


class ProjectService:
    """Projects are private to their owner; admins may see and change any."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = ProjectRepository(db)

    async def _get_owned(
        self, project_id: int, user_id: int, is_admin: bool
    ) -> Project:
        project = await self.repository.get_project_by_id(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        if not is_admin and project.owner_id != user_id:
            raise ForbiddenError("You do not have access to this project")
        return project

    async def create_project(
        self, data: ProjectCreate, owner_id: int
    ) -> ProjectResponse:
        values = data.model_dump(mode="json")
        values["name"] = values["name"].strip()
        if not values["name"]:
            raise InvalidInputError("Project name is required")
        values["owner_id"] = owner_id

        async with transaction(self.db, PROJECT_EXISTS):
            project = await self.repository.create_project(values)

        logger.info(
            "Project created successfully",
            extra={"project_id": project.id, "owner_id": owner_id},
        )
        return ProjectResponse.model_validate(project)

    async def get_project(
        self, project_id: int, user_id: int, is_admin: bool = False
    ) -> ProjectResponse:
        project = await self._get_owned(project_id, user_id, is_admin)
        return ProjectResponse.model_validate(project)

    async def list_projects(self, owner_id: int) -> ProjectListResponse:
        projects = await self.repository.list_projects(owner_id=owner_id)
        return ProjectListResponse(
            items=[ProjectResponse.model_validate(project) for project in projects],
            total=len(projects),
        )

    async def update_project(
        self,
        project_id: int,
        patch: ProjectUpdate,
        user_id: int,
        is_admin: bool = False,
    ) -> ProjectResponse:
        project = await self._get_owned(project_id, user_id, is_admin)
        changes = patch.model_dump(mode="json", exclude_unset=True)
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise InvalidInputError("Project name is required")
        if changes.get("status", "") is None:
            raise InvalidInputError("Project status cannot be empty")

        async with transaction(self.db, PROJECT_EXISTS):
            await self.repository.update_project(project, changes)

        logger.info(
            "Project updated successfully",
            extra={"project_id": project_id, "fields": sorted(changes)},
        )
        return ProjectResponse.model_validate(project)

    async def delete_project(
        self, project_id: int, user_id: int, is_admin: bool = False
    ) -> None:
        project = await self._get_owned(project_id, user_id, is_admin)
        async with transaction(self.db):
            await self.repository.delete_project(project)
        logger.info(
            "Project deleted", extra={"project_id": project_id, "user_id": user_id}
        )
