"""Project repository for database operations"""

from typing import Any, Dict, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.project import Project


class ProjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_project(self, data: Dict[str, Any]) -> Project:
        project = Project(**data)
        self.db.add(project)
        await self.db.flush()
        return project

    async def get_project_by_id(self, project_id: int) -> Optional[Project]:
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def list_projects(self, owner_id: Optional[int] = None) -> Sequence[Project]:
        query = select(Project)
        if owner_id is not None:
            query = query.where(Project.owner_id == owner_id)
        result = await self.db.execute(query.order_by(Project.name, Project.id))
        return result.scalars().all()

    async def update_project(
        self, project: Project, changes: Dict[str, Any]
    ) -> Project:
        for field, value in changes.items():
            setattr(project, field, value)
        await self.db.flush()
        return project

    async def delete_project(self, project: Project) -> None:
        await self.db.delete(project)
        await self.db.flush()
