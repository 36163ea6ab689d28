"""Category repository for database operations"""

from typing import Iterable, List, Optional, Sequence

from sqlalchemy import Index, and_, func, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.category import PARENT_NAME_INDEX, ROOT_NAME_INDEX, Category


def _category_index(name: str) -> Index:
    for index in Category.__table__.indexes:
        if index.name == name:
            return index
    raise KeyError(name)


class CategoryRepository:
    """Repository for category database operations.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    async def add_category(self, category: Category) -> Category:
        """Insert a category and derive its materialized path from the new id."""
        self.db.add(category)
        await self.db.flush()

        parent_path = None
        if category.parent_id is not None:
            parent_path = await self.db.scalar(
                select(Category.path).where(Category.id == category.parent_id)
            )
        category.path = (
            f"{parent_path}.{category.id}" if parent_path else str(category.id)
        )
        await self.db.flush()
        return category

    async def get_category_by_id(self, category_id: int) -> Optional[Category]:
        result = await self.db.execute(
            select(Category).where(Category.id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_categories_by_ids(
        self, category_ids: Iterable[int]
    ) -> List[Category]:
        ids = list(category_ids)
        if not ids:
            return []
        result = await self.db.execute(select(Category).where(Category.id.in_(ids)))
        return list(result.scalars().all())

    async def find_active_sibling(
        self, name: str, parent_id: Optional[int], exclude_id: Optional[int] = None
    ) -> Optional[Category]:
        """Non-deleted category named ``name`` in the sibling group of ``parent_id``."""
        parent_clause = (
            Category.parent_id.is_(None)
            if parent_id is None
            else Category.parent_id == parent_id
        )
        query = select(Category).where(
            Category.name == name,
            parent_clause,
            Category.is_deleted.is_(False),
        )
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def list_categories(
        self,
        parent_id: Optional[int] = None,
        roots_only: bool = False,
        exclude_deleted: bool = False,
        viewer_id: Optional[int] = None,
        is_admin: bool = False,
        search: Optional[str] = None,
    ) -> Sequence[Category]:
        query = select(Category)
        if parent_id is not None:
            query = query.where(Category.parent_id == parent_id)
        elif roots_only:
            query = query.where(Category.parent_id.is_(None))
        if exclude_deleted:
            query = query.where(Category.is_deleted.is_(False))
        if not is_admin:
            visible = Category.is_public.is_(True)
            if viewer_id is not None:
                visible = or_(visible, Category.created_by == viewer_id)
            query = query.where(visible)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Category.name).like(pattern),
                    func.lower(func.coalesce(Category.description, "")).like(pattern),
                )
            )
        query = query.order_by(Category.path, Category.name, Category.id)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_deleted_ids(self) -> set[int]:
        result = await self.db.execute(
            select(Category.id).where(Category.is_deleted.is_(True))
        )
        return set(result.scalars().all())

    async def get_descendants(self, path: str) -> Sequence[Category]:
        """Every category below the node at ``path``, in path order."""
        result = await self.db.execute(
            select(Category)
            .where(Category.path.like(f"{path}.%"))
            .order_by(Category.path)
        )
        return result.scalars().all()

    async def rewrite_descendant_paths(self, old_path: str, new_path: str) -> int:
        """Replace the ``old_path`` prefix of every descendant with ``new_path``."""
        descendants = await self.get_descendants(old_path)
        for descendant in descendants:
            descendant.path = new_path + descendant.path[len(old_path) :]
        await self.db.flush()
        return len(descendants)

    # --------------------------------------------------------------
    # Duplicate roots and uniqueness indexes
    # --------------------------------------------------------------

    async def find_duplicate_root_names(self) -> List[str]:
        result = await self.db.execute(
            select(Category.name)
            .where(Category.parent_id.is_(None), Category.is_deleted.is_(False))
            .group_by(Category.name)
            .having(func.count(Category.id) > 1)
            .order_by(Category.name)
        )
        return list(result.scalars().all())

    async def get_active_roots_named(self, name: str) -> Sequence[Category]:
        result = await self.db.execute(
            select(Category)
            .where(
                Category.name == name,
                Category.parent_id.is_(None),
                Category.is_deleted.is_(False),
            )
            .order_by(Category.created_at, Category.id)
        )
        return result.scalars().all()

    async def active_root_name_exists(self, name: str) -> bool:
        found = await self.db.scalar(
            select(Category.id)
            .where(
                and_(
                    Category.name == name,
                    Category.parent_id.is_(None),
                    Category.is_deleted.is_(False),
                )
            )
            .limit(1)
        )
        return found is not None

    async def acquire_group_lock(self, key: str) -> None:
        """Transaction-scoped advisory lock; a no-op outside PostgreSQL."""
        if self.dialect_name != "postgresql":
            return
        await self.db.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key}
        )

    async def create_unique_indexes(self) -> List[str]:
        names = [ROOT_NAME_INDEX, PARENT_NAME_INDEX]

        def _create(sync_session) -> None:
            connection = sync_session.connection()
            for name in names:
                _category_index(name).create(connection, checkfirst=True)

        await self.db.run_sync(_create)
        return names

    async def drop_unique_indexes(self) -> None:
        def _drop(sync_session) -> None:
            connection = sync_session.connection()
            for name in (ROOT_NAME_INDEX, PARENT_NAME_INDEX):
                _category_index(name).drop(connection, checkfirst=True)

        await self.db.run_sync(_drop)
