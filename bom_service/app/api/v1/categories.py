"""Category API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from bom_service.app.api.dependencies import (
    AdminUserDep,
    AuthenticatedUserDep,
    CategoryServiceDep,
    CorrelationIdDep,
    OptionalUserDep,
)
from bom_service.app.schemas.category import (
    CategoryBreadcrumb,
    CategoryCreate,
    CategoryCustomFields,
    CategoryListResponse,
    CategoryMove,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
    ConstraintInstallReport,
    ConstraintInstallRequest,
    DuplicateGroup,
    DuplicateResolutionReport,
    DuplicateResolveRequest,
)
from bom_service.app.schemas.user import CurrentUser
from bom_service.app.services.category_service import CategoryService
from bom_service.app.utils.logging import setup_bom_logging

logger = setup_bom_logging("categories_api")
router = APIRouter(prefix="/categories")


def _viewer(user: Optional[CurrentUser]) -> dict:
    if user is None:
        return {"viewer_id": None, "is_admin": False}
    return {"viewer_id": user.user_id, "is_admin": user.is_admin}


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    parent_id: Optional[str] = Query(None, description="Empty for root level"),
    roots_only: bool = False,
    exclude_deleted: bool = False,
    search: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: Optional[CurrentUser] = OptionalUserDep,
    service: CategoryService = CategoryServiceDep,
) -> CategoryListResponse:
    """List visible categories; soft-deleted ones and orphans are flagged."""
    return await service.list_categories(
        parent_id=parent_id,
        roots_only=roots_only,
        exclude_deleted=exclude_deleted,
        search=search,
        limit=limit,
        offset=offset,
        **_viewer(user),
    )


@router.get("/tree", response_model=List[CategoryTreeNode])
async def get_category_tree(
    user: Optional[CurrentUser] = OptionalUserDep,
    service: CategoryService = CategoryServiceDep,
) -> List[CategoryTreeNode]:
    return await service.get_category_tree(**_viewer(user))


@router.get("/search", response_model=List[CategoryResponse])
async def search_categories(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: Optional[CurrentUser] = OptionalUserDep,
    service: CategoryService = CategoryServiceDep,
) -> List[CategoryResponse]:
    return await service.search_categories(
        q, limit=limit, offset=offset, **_viewer(user)
    )


@router.get("/duplicates", response_model=List[DuplicateGroup])
async def detect_duplicate_roots(
    admin: CurrentUser = AdminUserDep,
    service: CategoryService = CategoryServiceDep,
) -> List[DuplicateGroup]:
    """Groups of live root categories sharing a name (admin only)"""
    return await service.detect_duplicate_roots()


@router.post("/duplicates/resolve", response_model=DuplicateResolutionReport)
async def resolve_duplicate_roots(
    data: DuplicateResolveRequest,
    admin: CurrentUser = AdminUserDep,
    service: CategoryService = CategoryServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> DuplicateResolutionReport:
    """Rename all but one member of each duplicate root group (admin only)"""
    report = await service.resolve_duplicate_roots(
        strategy=data.strategy, user_id=admin.user_id
    )
    logger.info(
        f"Duplicate roots resolved: {report.groups_processed} group(s)",
        extra={"correlation_id": correlation_id, "user_id": admin.user_id},
    )
    return report


@router.post("/constraints", response_model=ConstraintInstallReport)
async def install_category_constraints(
    data: ConstraintInstallRequest,
    admin: CurrentUser = AdminUserDep,
    service: CategoryService = CategoryServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> ConstraintInstallReport:
    """Install the unique category name indexes (admin only)"""
    report = await service.install_category_constraints(
        fix=data.fix, user_id=admin.user_id
    )
    logger.info(
        "Category constraints installed",
        extra={"correlation_id": correlation_id, "indexes": report.indexes},
    )
    return report


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    user: CurrentUser = AuthenticatedUserDep,
    service: CategoryService = CategoryServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> CategoryResponse:
    category = await service.create_category(
        name=data.name,
        created_by=user.user_id,
        parent_id=data.parent_id,
        description=data.description,
        is_public=data.is_public,
    )
    logger.info(
        f"Category created: {category.id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
    return category


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    user: Optional[CurrentUser] = OptionalUserDep,
    service: CategoryService = CategoryServiceDep,
) -> CategoryResponse:
    """Get category details by ID"""
    return await service.get_category(category_id, **_viewer(user))


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    user: CurrentUser = AuthenticatedUserDep,
    service: CategoryService = CategoryServiceDep,
) -> CategoryResponse:
    return await service.update_category(
        category_id, data, user_id=user.user_id, is_admin=user.is_admin
    )


@router.delete("/{category_id}", response_model=CategoryResponse)
async def delete_category(
    category_id: int,
    user: CurrentUser = AuthenticatedUserDep,
    service: CategoryService = CategoryServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> CategoryResponse:
    """Soft-delete a category; its children stay linked."""
    category = await service.soft_delete_category(
        category_id, user_id=user.user_id, is_admin=user.is_admin
    )
    logger.info(
        f"Category deleted: {category_id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
    return category


@router.post("/{category_id}/move", response_model=CategoryResponse)
async def move_category(
    category_id: int,
    data: CategoryMove,
    user: CurrentUser = AuthenticatedUserDep,
    service: CategoryService = CategoryServiceDep,
) -> CategoryResponse:
    return await service.reparent_category(
        category_id, data.parent_id, user_id=user.user_id, is_admin=user.is_admin
    )


@router.get("/{category_id}/children", response_model=List[CategoryResponse])
async def get_category_children(
    category_id: int,
    exclude_deleted: bool = False,
    user: Optional[CurrentUser] = OptionalUserDep,
    service: CategoryService = CategoryServiceDep,
) -> List[CategoryResponse]:
    return await service.get_category_children(
        category_id, exclude_deleted=exclude_deleted, **_viewer(user)
    )


@router.get("/{category_id}/breadcrumbs", response_model=List[CategoryBreadcrumb])
async def get_category_breadcrumbs(
    category_id: int,
    user: Optional[CurrentUser] = OptionalUserDep,
    service: CategoryService = CategoryServiceDep,
) -> List[CategoryBreadcrumb]:
    return await service.get_category_breadcrumbs(category_id, **_viewer(user))


@router.get("/{category_id}/custom-fields", response_model=CategoryCustomFields)
async def get_category_custom_fields(
    category_id: int,
    user: Optional[CurrentUser] = OptionalUserDep,
    service: CategoryService = CategoryServiceDep,
) -> CategoryCustomFields:
    return CategoryCustomFields(
        fields=await service.get_category_custom_fields(category_id, **_viewer(user))
    )


@router.put("/{category_id}/custom-fields", response_model=CategoryCustomFields)
async def replace_category_custom_fields(
    category_id: int,
    data: CategoryCustomFields,
    user: CurrentUser = AuthenticatedUserDep,
    service: CategoryService = CategoryServiceDep,
) -> CategoryCustomFields:
    """Replace every custom field value of a category in one step."""
    fields = await service.replace_category_custom_fields(
        category_id, data.fields, user_id=user.user_id, is_admin=user.is_admin
    )
    return CategoryCustomFields(fields=fields)
