"""Project API endpoints"""

from fastapi import APIRouter, status

from bom_service.app.api.dependencies import AuthenticatedUserDep, ProjectServiceDep
from bom_service.app.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from bom_service.app.schemas.user import CurrentUser
from bom_service.app.services.project_service import ProjectService

router = APIRouter(prefix="/projects")


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    user: CurrentUser = AuthenticatedUserDep,
    service: ProjectService = ProjectServiceDep,
) -> ProjectListResponse:
    """Projects owned by the current user"""
    return await service.list_projects(owner_id=user.user_id)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    user: CurrentUser = AuthenticatedUserDep,
    service: ProjectService = ProjectServiceDep,
) -> ProjectResponse:
    return await service.create_project(data, owner_id=user.user_id)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    user: CurrentUser = AuthenticatedUserDep,
    service: ProjectService = ProjectServiceDep,
) -> ProjectResponse:
    return await service.get_project(project_id, user.user_id, user.is_admin)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    user: CurrentUser = AuthenticatedUserDep,
    service: ProjectService = ProjectServiceDep,
) -> ProjectResponse:
    return await service.update_project(
        project_id, data, user.user_id, is_admin=user.is_admin
    )


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: int,
    user: CurrentUser = AuthenticatedUserDep,
    service: ProjectService = ProjectServiceDep,
) -> None:
    await service.delete_project(project_id, user.user_id, is_admin=user.is_admin)
