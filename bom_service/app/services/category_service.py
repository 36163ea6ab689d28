"""
Category hierarchy service.

Keeps the category tree consistent: one non-deleted root per name, one
non-deleted child per (parent, name), a materialized ``path`` that always
matches the ancestor chain, and no cycles. Also detects and repairs legacy
duplicate roots and installs the partial unique indexes that enforce the
name invariants at the database level.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    CategoryCycleError,
    ConstraintViolationError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from ..core.settings import get_settings
from ..models.base import utcnow
from ..models.category import Category
from ..repository.category_repository import CategoryRepository
from ..repository.custom_field_repository import CustomFieldRepository
from ..schemas.category import (
    CategoryBreadcrumb,
    CategoryListResponse,
    CategoryRename,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
    ConstraintInstallReport,
    DuplicateGroup,
    DuplicateMember,
    DuplicateResolutionReport,
)
from ..schemas.common import blank_to_none
from ..utils.logging import setup_bom_logging as setup_logging
from .transaction import transaction

logger = setup_logging("category_service", log_level=get_settings().LOG_LEVEL)

DUPLICATE_STRATEGIES = ("keep-newest", "keep-oldest")


def _coerce_parent_id(parent_id: Any) -> Optional[int]:
    parent_id = blank_to_none(parent_id)
    if parent_id is None:
        return None
    if isinstance(parent_id, bool):
        raise InvalidInputError("Invalid parent category id")
    try:
        return int(parent_id)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid parent category id: {parent_id!r}") from None


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidInputError("Category name is required")
    return cleaned


def _duplicate_message(name: str, parent_id: Optional[int]) -> str:
    if parent_id is None:
        return f"A root category named '{name}' already exists"
    return f"A category named '{name}' already exists under this parent"


class CategoryService:
    """Service class for category hierarchy business logic"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = CategoryRepository(db)
        self.custom_fields = CustomFieldRepository(db)
        self.duplicate_suffix = get_settings().DUPLICATE_CATEGORY_SUFFIX

    # --------------------------------------------------------------
    # Helpers
    # --------------------------------------------------------------

    @staticmethod
    def _ensure_can_modify(
        category: Category, user_id: Optional[int], is_admin: bool
    ) -> None:
        if is_admin:
            return
        if user_id is None or category.created_by != user_id:
            raise ForbiddenError("Only the creator can modify this category")

    @staticmethod
    def _is_visible(
        category: Category, viewer_id: Optional[int], is_admin: bool
    ) -> bool:
        return (
            is_admin
            or category.is_public
            or (viewer_id is not None and category.created_by == viewer_id)
        )

    @staticmethod
    def _to_response(
        category: Category, deleted_ids: Optional[set[int]] = None
    ) -> CategoryResponse:
        orphaned = bool(deleted_ids) and any(
            ancestor in deleted_ids for ancestor in category.ancestor_ids
        )
        return CategoryResponse.model_validate(category).model_copy(
            update={"is_orphaned": orphaned}
        )

    async def _get_existing(self, category_id: int) -> Category:
        category = await self.repository.get_category_by_id(category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        return category

    async def _get_visible(
        self, category_id: int, viewer_id: Optional[int], is_admin: bool
    ) -> Category:
        category = await self._get_existing(category_id)
        if not self._is_visible(category, viewer_id, is_admin):
            raise NotFoundError(f"Category {category_id} not found")
        return category

    async def _get_active(self, category_id: int) -> Category:
        category = await self._get_existing(category_id)
        if category.is_deleted:
            raise NotFoundError(f"Category {category_id} not found")
        return category

    async def _ensure_name_available(
        self, name: str, parent_id: Optional[int], exclude_id: Optional[int] = None
    ) -> None:
        clash = await self.repository.find_active_sibling(name, parent_id, exclude_id)
        if clash is not None:
            raise ConstraintViolationError(
                _duplicate_message(name, parent_id),
                details={"conflicting_category_id": clash.id},
            )

    async def _resolve_new_parent(
        self, category: Category, new_parent_id: Optional[int]
    ) -> Optional[Category]:
        """Validate a destination parent for ``category`` and return it."""
        if new_parent_id is None:
            return None
        if new_parent_id == category.id:
            raise CategoryCycleError("A category cannot be its own parent")

        parent = await self.repository.get_category_by_id(new_parent_id)
        if parent is None or parent.is_deleted:
            raise NotFoundError(f"Parent category {new_parent_id} not found")
        if category.path and (parent.path or "").startswith(f"{category.path}."):
            raise CategoryCycleError(
                "A category cannot be moved under one of its descendants",
                details={"category_id": category.id, "parent_id": new_parent_id},
            )
        return parent

    async def _assign_parent(
        self, category: Category, parent: Optional[Category]
    ) -> int:
        """Move ``category`` under ``parent`` and rewrite the subtree paths."""
        old_path = category.path or str(category.id)
        new_path = f"{parent.path}.{category.id}" if parent else str(category.id)
        category.parent_id = parent.id if parent else None
        category.path = new_path
        return await self.repository.rewrite_descendant_paths(old_path, new_path)

    # --------------------------------------------------------------
    # Mutations
    # --------------------------------------------------------------

    async def create_category(
        self,
        name: str,
        created_by: Optional[int],
        parent_id: Any = None,
        description: Optional[str] = None,
        is_public: bool = True,
    ) -> CategoryResponse:
        """Create a category as a root, or under an existing non-deleted parent."""
        parent_id = _coerce_parent_id(parent_id)
        name = _clean_name(name)

        if parent_id is not None:
            parent = await self.repository.get_category_by_id(parent_id)
            if parent is None or parent.is_deleted:
                raise NotFoundError(f"Parent category {parent_id} not found")

        await self._ensure_name_available(name, parent_id)

        category = Category(
            name=name,
            parent_id=parent_id,
            description=description,
            is_public=is_public,
            created_by=created_by,
            updated_by=created_by,
        )
        async with transaction(self.db, _duplicate_message(name, parent_id)):
            await self.repository.add_category(category)

        logger.info(
            "Category created successfully",
            extra={
                "category_id": category.id,
                "category_name": name,
                "parent_id": parent_id,
                "user_id": created_by,
            },
        )
        return self._to_response(category)

    async def rename_category(
        self,
        category_id: int,
        new_name: str,
        user_id: Optional[int],
        is_admin: bool = False,
    ) -> CategoryResponse:
        category = await self._get_active(category_id)
        self._ensure_can_modify(category, user_id, is_admin)
        new_name = _clean_name(new_name)

        if new_name != category.name:
            parent_id = category.parent_id
            await self._ensure_name_available(
                new_name, parent_id, exclude_id=category.id
            )
            async with transaction(self.db, _duplicate_message(new_name, parent_id)):
                category.name = new_name
                category.updated_by = user_id

            logger.info(
                "Category renamed",
                extra={"category_id": category_id, "user_id": user_id},
            )
        return self._to_response(category)

    async def reparent_category(
        self,
        category_id: int,
        new_parent_id: Any,
        user_id: Optional[int] = None,
        is_admin: bool = False,
    ) -> CategoryResponse:
        """Move a category (and its subtree) under ``new_parent_id``.

        An empty or ``None`` parent makes the category a root. Moving a
        category under itself or one of its descendants raises
        ``CategoryCycleError`` and leaves the tree untouched.
        """
        new_parent_id = _coerce_parent_id(new_parent_id)
        category = await self._get_active(category_id)
        if user_id is not None:
            self._ensure_can_modify(category, user_id, is_admin)

        parent = await self._resolve_new_parent(category, new_parent_id)
        if new_parent_id == category.parent_id:
            return self._to_response(category)

        name = category.name
        await self._ensure_name_available(name, new_parent_id, exclude_id=category.id)

        async with transaction(self.db, _duplicate_message(name, new_parent_id)):
            moved = await self._assign_parent(category, parent)
            category.updated_by = user_id

        logger.info(
            "Category moved",
            extra={
                "category_id": category_id,
                "parent_id": new_parent_id,
                "descendants_updated": moved,
                "user_id": user_id,
            },
        )
        return self._to_response(category)

    async def update_category(
        self,
        category_id: int,
        patch: CategoryUpdate,
        user_id: Optional[int],
        is_admin: bool = False,
    ) -> CategoryResponse:
        """Apply the fields present in ``patch`` as one change."""
        changes = patch.model_dump(exclude_unset=True)
        category = await self._get_active(category_id)
        self._ensure_can_modify(category, user_id, is_admin)

        target_name = category.name
        if "name" in changes:
            target_name = _clean_name(changes["name"])

        target_parent_id = category.parent_id
        parent: Optional[Category] = None
        moving = False
        if "parent_id" in changes:
            target_parent_id = _coerce_parent_id(changes["parent_id"])
            moving = target_parent_id != category.parent_id
            parent = await self._resolve_new_parent(category, target_parent_id)

        if moving or target_name != category.name:
            await self._ensure_name_available(
                target_name, target_parent_id, exclude_id=category.id
            )

        async with transaction(
            self.db, _duplicate_message(target_name, target_parent_id)
        ):
            category.name = target_name
            if "description" in changes:
                category.description = changes["description"]
            if changes.get("is_public") is not None:
                category.is_public = changes["is_public"]
            if moving:
                await self._assign_parent(category, parent)
            category.updated_by = user_id

        logger.info(
            "Category updated successfully",
            extra={
                "category_id": category_id,
                "fields": sorted(changes),
                "user_id": user_id,
            },
        )
        return self._to_response(category)

    async def soft_delete_category(
        self, category_id: int, user_id: Optional[int], is_admin: bool = False
    ) -> CategoryResponse:
        """Mark a category deleted. Children stay linked and become orphans."""
        category = await self._get_active(category_id)
        self._ensure_can_modify(category, user_id, is_admin)

        async with transaction(self.db):
            category.is_deleted = True
            category.deleted_at = utcnow()
            category.deleted_by = user_id
            category.updated_by = user_id

        logger.info(
            "Category soft-deleted",
            extra={"category_id": category_id, "user_id": user_id},
        )
        return self._to_response(category)

    async def replace_category_custom_fields(
        self,
        category_id: int,
        fields: Mapping[str, Any],
        user_id: Optional[int],
        is_admin: bool = False,
    ) -> Dict[str, Any]:
        category = await self._get_active(category_id)
        self._ensure_can_modify(category, user_id, is_admin)

        async with transaction(self.db, "Duplicate custom field"):
            await self.custom_fields.replace_values("category", category_id, fields)

        logger.info(
            "Category custom fields replaced",
            extra={
                "category_id": category_id,
                "field_count": len(fields),
                "user_id": user_id,
            },
        )
        return await self.custom_fields.get_values("category", category_id)

    # --------------------------------------------------------------
    # Duplicate roots and uniqueness constraints
    # --------------------------------------------------------------

    async def detect_duplicate_roots(self) -> List[DuplicateGroup]:
        """Groups of non-deleted root categories sharing a name."""
        groups = []
        for name in await self.repository.find_duplicate_root_names():
            members = await self.repository.get_active_roots_named(name)
            groups.append(
                DuplicateGroup(
                    name=name,
                    count=len(members),
                    members=[
                        DuplicateMember(
                            id=member.id,
                            created_at=member.created_at,
                            created_by=member.created_by,
                        )
                        for member in members
                    ],
                )
            )
        return groups

    def _numbered_suffix(self, counter: int) -> str:
        """" (duplicate)", then " (duplicate 2)", " (duplicate 3)" and so on."""
        suffix = self.duplicate_suffix
        if counter == 1:
            return suffix
        if suffix.endswith(")"):
            return f"{suffix[:-1]} {counter})"
        return f"{suffix} {counter}"

    async def _next_duplicate_name(self, name: str) -> str:
        counter = 1
        candidate = f"{name}{self._numbered_suffix(counter)}"
        while await self.repository.active_root_name_exists(candidate):
            counter += 1
            candidate = f"{name}{self._numbered_suffix(counter)}"
        return candidate

    @staticmethod
    def _pick_survivor(members: Sequence[Category], strategy: str) -> Category:
        ordered = sorted(members, key=lambda member: (member.created_at, member.id))
        return ordered[-1] if strategy == "keep-newest" else ordered[0]

    async def resolve_duplicate_roots(
        self, strategy: str = "keep-newest", user_id: Optional[int] = None
    ) -> DuplicateResolutionReport:
        """Rename all but one member of each duplicate root group.

        Each group is repaired in its own transaction. Part links are not
        moved. Running it again on a repaired database changes nothing.
        """
        if strategy not in DUPLICATE_STRATEGIES:
            raise InvalidInputError(
                f"Unknown duplicate resolution strategy: {strategy}",
                details={"allowed": list(DUPLICATE_STRATEGIES)},
            )

        report = DuplicateResolutionReport(strategy=strategy)
        for name in await self.repository.find_duplicate_root_names():
            async with transaction(self.db, f"Could not rename duplicates of '{name}'"):
                await self.repository.acquire_group_lock(f"category:root:{name}")
                members = await self.repository.get_active_roots_named(name)
                if len(members) < 2:
                    continue

                survivor = self._pick_survivor(members, strategy)
                renames = []
                for member in members:
                    if member.id == survivor.id:
                        continue
                    new_name = await self._next_duplicate_name(name)
                    member.name = new_name
                    member.updated_by = user_id
                    await self.db.flush()
                    renames.append(
                        CategoryRename(id=member.id, old_name=name, new_name=new_name)
                    )

            report.groups_processed += 1
            report.kept_ids.append(survivor.id)
            report.renamed.extend(renames)
            logger.info(
                "Duplicate root categories resolved",
                extra={
                    "category_name": name,
                    "kept_id": survivor.id,
                    "renamed_ids": [rename.id for rename in renames],
                    "strategy": strategy,
                },
            )
        return report

    async def install_category_constraints(
        self, fix: bool = False, user_id: Optional[int] = None
    ) -> ConstraintInstallReport:
        """Create the partial unique indexes on category names if absent.

        Existing duplicate roots block installation unless ``fix`` is set,
        in which case they are resolved with the keep-newest strategy first.
        """
        groups = await self.detect_duplicate_roots()
        resolution = None
        if groups:
            if not fix:
                raise ConstraintViolationError(
                    "Duplicate root categories must be resolved first",
                    details={
                        "duplicates": [
                            group.model_dump(mode="json") for group in groups
                        ]
                    },
                )
            resolution = await self.resolve_duplicate_roots(user_id=user_id)

        async with transaction(
            self.db, "Duplicate category names prevent installing the constraints"
        ):
            indexes = await self.repository.create_unique_indexes()

        logger.info(
            "Category constraints installed",
            extra={"indexes": indexes, "resolved_groups": len(groups)},
        )
        return ConstraintInstallReport(indexes=indexes, resolution=resolution)

    # --------------------------------------------------------------
    # Reads
    # --------------------------------------------------------------

    async def get_category(
        self, category_id: int, viewer_id: Optional[int] = None, is_admin: bool = False
    ) -> CategoryResponse:
        category = await self._get_visible(category_id, viewer_id, is_admin)
        deleted_ids = await self.repository.get_deleted_ids()
        return self._to_response(category, deleted_ids)

    async def list_categories(
        self,
        viewer_id: Optional[int] = None,
        is_admin: bool = False,
        parent_id: Any = None,
        roots_only: bool = False,
        exclude_deleted: bool = False,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> CategoryListResponse:
        """Visible categories, orphans flagged; ``exclude_deleted`` drops both."""
        categories = await self.repository.list_categories(
            parent_id=_coerce_parent_id(parent_id),
            roots_only=roots_only,
            exclude_deleted=exclude_deleted,
            viewer_id=viewer_id,
            is_admin=is_admin,
            search=search.strip() if search else None,
        )
        deleted_ids = await self.repository.get_deleted_ids()
        items = [self._to_response(category, deleted_ids) for category in categories]
        if exclude_deleted:
            items = [item for item in items if not item.is_orphaned]
        return CategoryListResponse(
            items=items[offset : offset + limit],
            total=len(items),
            limit=limit,
            offset=offset,
        )

    async def search_categories(
        self,
        query: str,
        limit: int = 20,
        offset: int = 0,
        viewer_id: Optional[int] = None,
        is_admin: bool = False,
    ) -> List[CategoryResponse]:
        if not query or not query.strip():
            return []
        result = await self.list_categories(
            viewer_id=viewer_id,
            is_admin=is_admin,
            exclude_deleted=True,
            search=query,
            limit=limit,
            offset=offset,
        )
        return result.items

    async def get_category_children(
        self,
        category_id: int,
        exclude_deleted: bool = False,
        viewer_id: Optional[int] = None,
        is_admin: bool = False,
    ) -> List[CategoryResponse]:
        """Descendants of a category the viewer may see, in path order."""
        category = await self._get_visible(category_id, viewer_id, is_admin)
        descendants = await self.repository.get_descendants(
            category.path or str(category.id)
        )
        deleted_ids = await self.repository.get_deleted_ids()
        items = [
            self._to_response(child, deleted_ids)
            for child in descendants
            if self._is_visible(child, viewer_id, is_admin)
        ]
        if exclude_deleted:
            items = [
                item for item in items if not (item.is_deleted or item.is_orphaned)
            ]
        return items

    async def get_category_breadcrumbs(
        self, category_id: int, viewer_id: Optional[int] = None, is_admin: bool = False
    ) -> List[CategoryBreadcrumb]:
        """Visible ancestors of a category followed by the category, root first."""
        category = await self._get_visible(category_id, viewer_id, is_admin)
        chain = category.ancestor_ids + [category.id]
        by_id = {
            ancestor.id: ancestor
            for ancestor in await self.repository.get_categories_by_ids(chain)
            if self._is_visible(ancestor, viewer_id, is_admin)
        }
        return [
            CategoryBreadcrumb(id=by_id[node_id].id, name=by_id[node_id].name)
            for node_id in chain
            if node_id in by_id
        ]

    async def get_category_tree(
        self, viewer_id: Optional[int] = None, is_admin: bool = False
    ) -> List[CategoryTreeNode]:
        """Nested tree of visible, non-deleted categories."""
        categories = await self.repository.list_categories(
            exclude_deleted=True, viewer_id=viewer_id, is_admin=is_admin
        )
        deleted_ids = await self.repository.get_deleted_ids()

        nodes: Dict[int, CategoryTreeNode] = {}
        for category in categories:
            if any(ancestor in deleted_ids for ancestor in category.ancestor_ids):
                continue
            nodes[category.id] = CategoryTreeNode.model_validate(category)

        roots: List[CategoryTreeNode] = []
        for node in nodes.values():
            if node.parent_id is None:
                roots.append(node)
            elif node.parent_id in nodes:
                nodes[node.parent_id].children.append(node)
        return roots

    async def get_category_custom_fields(
        self, category_id: int, viewer_id: Optional[int] = None, is_admin: bool = False
    ) -> Dict[str, Any]:
        await self._get_visible(category_id, viewer_id, is_admin)
        return await self.custom_fields.get_values("category", category_id)
