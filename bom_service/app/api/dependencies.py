from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bom_service.app.core.database import get_database_manager
from bom_service.app.middleware.auth.auth_middleware import (
    admin_user,
    authenticated_user,
    optional_user,
)
from bom_service.app.services.auth_service import AuthService
from bom_service.app.services.category_service import CategoryService
from bom_service.app.services.manufacturer_service import ManufacturerService
from bom_service.app.services.part_service import PartService
from bom_service.app.services.project_service import ProjectService
from bom_service.app.services.supplier_service import SupplierService


# --------------------------------------------------------------
# Database Dependency
# --------------------------------------------------------------
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""

    async with get_database_manager().async_session_maker() as session:
        yield session


# --------------------------------------------------------------
# Service Dependencies
# --------------------------------------------------------------
def get_auth_service(session: AsyncSession = Depends(get_async_session)) -> AuthService:
    """Provide AuthService instance"""

    return AuthService(session)


def get_category_service(
    session: AsyncSession = Depends(get_async_session),
) -> CategoryService:
    """Provide CategoryService instance"""

    return CategoryService(session)


def get_manufacturer_service(
    session: AsyncSession = Depends(get_async_session),
) -> ManufacturerService:
    """Provide ManufacturerService instance"""

    return ManufacturerService(session)


def get_supplier_service(
    session: AsyncSession = Depends(get_async_session),
) -> SupplierService:
    """Provide SupplierService instance"""

    return SupplierService(session)


def get_part_service(session: AsyncSession = Depends(get_async_session)) -> PartService:
    """Provide PartService instance"""

    return PartService(session)


def get_project_service(
    session: AsyncSession = Depends(get_async_session),
) -> ProjectService:
    """Provide ProjectService instance"""

    return ProjectService(session)


# --------------------------------------------------------------
# Request-Based Dependencies
# --------------------------------------------------------------
def get_correlation_id(request: Request) -> Optional[str]:
    """Correlation ID assigned to the request by the auth middleware"""

    return getattr(request.state, "correlation_id", None)


CorrelationIdDep = Depends(get_correlation_id)
DatabaseDep = Depends(get_async_session)

OptionalUserDep = Depends(optional_user)
AuthenticatedUserDep = Depends(authenticated_user)
AdminUserDep = Depends(admin_user)

AuthServiceDep = Depends(get_auth_service)
CategoryServiceDep = Depends(get_category_service)
ManufacturerServiceDep = Depends(get_manufacturer_service)
SupplierServiceDep = Depends(get_supplier_service)
PartServiceDep = Depends(get_part_service)
ProjectServiceDep = Depends(get_project_service)
