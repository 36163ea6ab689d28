from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from bom_service.app.core.exceptions import (
    CategoryCycleError,
    ConstraintViolationError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from bom_service.app.models.category import Category
from bom_service.app.repository.category_repository import CategoryRepository
from bom_service.app.schemas.category import CategoryUpdate
from bom_service.app.services.category_service import CategoryService


class TestCategoryService:
    """Category hierarchy behaviour against a real SQLite database."""

    @pytest.fixture
    def service(self, db_session):
        return CategoryService(db_session)

    async def _insert_root(self, db_session, name: str, created_at: datetime):
        """Insert a root directly, bypassing the service's name checks."""
        category = Category(name=name, created_at=created_at, updated_at=created_at)
        await CategoryRepository(db_session).add_category(category)
        await db_session.commit()
        return category

    async def _drop_name_indexes(self, db_session):
        await CategoryRepository(db_session).drop_unique_indexes()
        await db_session.commit()

    # --------------------------------------------------------------
    # Creation and name uniqueness
    # --------------------------------------------------------------

    async def test_create_root_sets_path(self, service, user):
        category = await service.create_category("Resistors", created_by=user.id)

        assert category.parent_id is None
        assert category.path == str(category.id)
        assert category.depth == 0
        assert category.created_by == user.id

    async def test_duplicate_root_rejected(self, service, user):
        await service.create_category("Resistors", created_by=user.id)

        with pytest.raises(ConstraintViolationError) as exc_info:
            await service.create_category("Resistors", created_by=user.id)

        assert "root category" in exc_info.value.message

    async def test_duplicate_root_rejected_after_whitespace_trim(self, service, user):
        await service.create_category("Resistors", created_by=user.id)

        with pytest.raises(ConstraintViolationError):
            await service.create_category("  Resistors ", created_by=user.id)

    async def test_duplicate_sibling_rejected(self, service, user):
        parent = await service.create_category("Passives", created_by=user.id)
        await service.create_category("Resistors", user.id, parent_id=parent.id)

        with pytest.raises(ConstraintViolationError):
            await service.create_category("Resistors", user.id, parent_id=parent.id)

    async def test_same_name_under_different_parents(self, service, user):
        first = await service.create_category("Passives", created_by=user.id)
        second = await service.create_category("Actives", created_by=user.id)

        a = await service.create_category("Misc", user.id, parent_id=first.id)
        b = await service.create_category("Misc", user.id, parent_id=second.id)

        assert a.id != b.id
        assert a.path == f"{first.id}.{a.id}"
        assert b.path == f"{second.id}.{b.id}"

    async def test_root_name_reusable_after_soft_delete(self, service, user):
        original = await service.create_category("Resistors", created_by=user.id)
        await service.soft_delete_category(original.id, user_id=user.id)

        replacement = await service.create_category("Resistors", created_by=user.id)

        assert replacement.id != original.id

    async def test_empty_string_parent_means_root(self, service, user):
        category = await service.create_category("Resistors", user.id, parent_id="")

        assert category.parent_id is None
        assert category.path == str(category.id)

    async def test_invalid_parent_id_rejected(self, service, user):
        with pytest.raises(InvalidInputError):
            await service.create_category("Resistors", user.id, parent_id="abc")

    async def test_missing_parent_rejected(self, service, user):
        with pytest.raises(NotFoundError):
            await service.create_category("Resistors", user.id, parent_id=999)

    async def test_blank_name_rejected(self, service, user):
        with pytest.raises(InvalidInputError):
            await service.create_category("   ", created_by=user.id)

    # --------------------------------------------------------------
    # Rename, update and ownership
    # --------------------------------------------------------------

    async def test_rename_by_owner(self, service, user):
        category = await service.create_category("Resistors", created_by=user.id)

        renamed = await service.rename_category(category.id, "Resistor", user.id)

        assert renamed.name == "Resistor"

    async def test_rename_by_other_user_forbidden(self, service, user, other_user):
        category = await service.create_category("Resistors", created_by=user.id)

        with pytest.raises(ForbiddenError):
            await service.rename_category(category.id, "Mine now", other_user.id)

    async def test_rename_by_admin_allowed(self, service, user, admin):
        category = await service.create_category("Resistors", created_by=user.id)

        renamed = await service.rename_category(
            category.id, "Fixed resistors", admin.id, is_admin=True
        )

        assert renamed.name == "Fixed resistors"
        assert renamed.updated_by == admin.id

    async def test_rename_to_existing_sibling_rejected(self, service, user):
        await service.create_category("Resistors", created_by=user.id)
        other = await service.create_category("Capacitors", created_by=user.id)

        with pytest.raises(ConstraintViolationError):
            await service.rename_category(other.id, "Resistors", user.id)

    async def test_update_applies_only_present_fields(self, service, user):
        category = await service.create_category(
            "Resistors", user.id, description="Fixed value"
        )

        updated = await service.update_category(
            category.id, CategoryUpdate(is_public=False), user.id
        )

        assert updated.is_public is False
        assert updated.name == "Resistors"
        assert updated.description == "Fixed value"

    # --------------------------------------------------------------
    # Reparenting
    # --------------------------------------------------------------

    async def test_reparent_rewrites_descendant_paths(self, service, user):
        a = await service.create_category("A", created_by=user.id)
        b = await service.create_category("B", user.id, parent_id=a.id)
        c = await service.create_category("C", user.id, parent_id=b.id)
        d = await service.create_category("D", created_by=user.id)

        moved = await service.reparent_category(b.id, d.id, user_id=user.id)
        grandchild = await service.get_category(c.id)

        assert moved.parent_id == d.id
        assert moved.path == f"{d.id}.{b.id}"
        assert grandchild.path == f"{d.id}.{b.id}.{c.id}"
        assert grandchild.depth == 2

    async def test_reparent_to_root_with_empty_string(self, service, user):
        a = await service.create_category("A", created_by=user.id)
        b = await service.create_category("B", user.id, parent_id=a.id)

        moved = await service.reparent_category(b.id, "", user_id=user.id)

        assert moved.parent_id is None
        assert moved.path == str(b.id)

    async def test_reparent_under_descendant_is_a_cycle(self, service, user):
        a = await service.create_category("A", created_by=user.id)
        b = await service.create_category("B", user.id, parent_id=a.id)
        c = await service.create_category("C", user.id, parent_id=b.id)

        with pytest.raises(CategoryCycleError):
            await service.reparent_category(a.id, c.id, user_id=user.id)

        root = await service.get_category(a.id)
        leaf = await service.get_category(c.id)
        assert root.parent_id is None
        assert root.path == str(a.id)
        assert leaf.path == f"{a.id}.{b.id}.{c.id}"

    async def test_reparent_under_itself_is_a_cycle(self, service, user):
        a = await service.create_category("A", created_by=user.id)

        with pytest.raises(CategoryCycleError):
            await service.reparent_category(a.id, a.id, user_id=user.id)

    async def test_reparent_into_name_clash_rejected(self, service, user):
        a = await service.create_category("A", created_by=user.id)
        await service.create_category("Misc", user.id, parent_id=a.id)
        stray = await service.create_category("Misc", created_by=user.id)

        with pytest.raises(ConstraintViolationError):
            await service.reparent_category(stray.id, a.id, user_id=user.id)

    # --------------------------------------------------------------
    # Soft delete and orphans
    # --------------------------------------------------------------

    async def test_children_of_deleted_category_are_orphaned(self, service, user):
        parent = await service.create_category("Passives", created_by=user.id)
        child = await service.create_category("Resistors", user.id, parent_id=parent.id)
        await service.soft_delete_category(parent.id, user_id=user.id)

        listed = await service.list_categories(viewer_id=user.id)
        by_id = {item.id: item for item in listed.items}

        assert by_id[parent.id].is_deleted is True
        assert by_id[child.id].parent_id == parent.id
        assert by_id[child.id].is_orphaned is True

        active = await service.list_categories(viewer_id=user.id, exclude_deleted=True)
        assert active.total == 0

    async def test_tree_hides_deleted_branches(self, service, user):
        passives = await service.create_category("Passives", created_by=user.id)
        resistors = await service.create_category(
            "Resistors", user.id, parent_id=passives.id
        )
        actives = await service.create_category("Actives", created_by=user.id)
        await service.create_category("Diodes", user.id, parent_id=actives.id)
        await service.soft_delete_category(passives.id, user_id=user.id)

        tree = await service.get_category_tree(viewer_id=user.id)

        assert [node.name for node in tree] == ["Actives"]
        assert [child.name for child in tree[0].children] == ["Diodes"]
        assert resistors.id not in {node.id for node in tree}

    async def test_breadcrumbs_root_first(self, service, user):
        a = await service.create_category("A", created_by=user.id)
        b = await service.create_category("B", user.id, parent_id=a.id)
        c = await service.create_category("C", user.id, parent_id=b.id)

        crumbs = await service.get_category_breadcrumbs(c.id)

        assert [crumb.name for crumb in crumbs] == ["A", "B", "C"]

    async def test_private_category_hidden_from_other_users(
        self, service, user, other_user
    ):
        private = await service.create_category(
            "Secret", created_by=user.id, is_public=False
        )

        with pytest.raises(NotFoundError):
            await service.get_category(private.id, viewer_id=other_user.id)

        own = await service.get_category(private.id, viewer_id=user.id)
        assert own.name == "Secret"

    async def test_private_category_reads_are_not_found(
        self, service, user, other_user
    ):
        private = await service.create_category(
            "Secret", created_by=user.id, is_public=False
        )
        inner = await service.create_category(
            "Inner", user.id, parent_id=private.id, is_public=False
        )
        await service.replace_category_custom_fields(private.id, {"k": "v"}, user.id)

        for viewer_id in (None, other_user.id):
            with pytest.raises(NotFoundError):
                await service.get_category_children(private.id, viewer_id=viewer_id)
            with pytest.raises(NotFoundError):
                await service.get_category_breadcrumbs(inner.id, viewer_id=viewer_id)
            with pytest.raises(NotFoundError):
                await service.get_category_custom_fields(
                    private.id, viewer_id=viewer_id
                )

        children = await service.get_category_children(private.id, viewer_id=user.id)
        assert [child.name for child in children] == ["Inner"]
        fields = await service.get_category_custom_fields(
            private.id, is_admin=True
        )
        assert fields == {"k": "v"}

    async def test_hidden_relatives_are_left_out(self, service, user, other_user):
        public = await service.create_category("Passives", created_by=user.id)
        hidden = await service.create_category(
            "Secret", user.id, parent_id=public.id, is_public=False
        )
        leaf = await service.create_category("Leaf", user.id, parent_id=hidden.id)

        children = await service.get_category_children(
            public.id, viewer_id=other_user.id
        )
        crumbs = await service.get_category_breadcrumbs(
            leaf.id, viewer_id=other_user.id
        )

        assert [child.name for child in children] == ["Leaf"]
        assert [crumb.name for crumb in crumbs] == ["Passives", "Leaf"]

    async def test_search_ignores_blank_query(self, service, user):
        await service.create_category("Resistors", created_by=user.id)

        assert await service.search_categories("  ") == []
        found = await service.search_categories("resist")
        assert [item.name for item in found] == ["Resistors"]

    # --------------------------------------------------------------
    # Custom fields
    # --------------------------------------------------------------

    async def test_replace_custom_fields(self, service, user):
        category = await service.create_category("Resistors", created_by=user.id)

        await service.replace_category_custom_fields(
            category.id, {"voltage": 5, "rating": "1W"}, user.id
        )
        fields = await service.replace_category_custom_fields(
            category.id, {"voltage": 12}, user.id
        )

        assert fields == {"voltage": 12}
        assert await service.get_category_custom_fields(category.id) == {"voltage": 12}

    # --------------------------------------------------------------
    # Duplicate roots and constraints
    # --------------------------------------------------------------

    async def test_detect_duplicate_roots(self, service, db_session):
        await self._drop_name_indexes(db_session)
        await self._insert_root(db_session, "Resistors", datetime(2024, 1, 1))
        await self._insert_root(db_session, "Resistors", datetime(2024, 2, 1))
        await self._insert_root(db_session, "Capacitors", datetime(2024, 1, 1))

        groups = await service.detect_duplicate_roots()

        assert [(group.name, group.count) for group in groups] == [("Resistors", 2)]

    async def test_resolve_keeps_newest_and_is_idempotent(self, service, db_session):
        await self._drop_name_indexes(db_session)
        oldest = await self._insert_root(db_session, "Resistors", datetime(2024, 1, 1))
        middle = await self._insert_root(db_session, "Resistors", datetime(2024, 2, 1))
        newest = await self._insert_root(db_session, "Resistors", datetime(2024, 3, 1))

        report = await service.resolve_duplicate_roots("keep-newest")

        assert report.groups_processed == 1
        assert report.kept_ids == [newest.id]
        names = {
            category.id: (await service.get_category(category.id)).name
            for category in (oldest, middle, newest)
        }
        assert names[newest.id] == "Resistors"
        assert names[oldest.id] == "Resistors (duplicate)"
        assert names[middle.id] == "Resistors (duplicate 2)"

        again = await service.resolve_duplicate_roots("keep-newest")
        assert again.groups_processed == 0
        assert again.renamed == []

    async def test_resolve_keep_oldest(self, service, db_session):
        await self._drop_name_indexes(db_session)
        oldest = await self._insert_root(db_session, "Resistors", datetime(2024, 1, 1))
        await self._insert_root(db_session, "Resistors", datetime(2024, 2, 1))

        report = await service.resolve_duplicate_roots("keep-oldest")

        assert report.kept_ids == [oldest.id]

    async def test_resolve_rejects_unknown_strategy(self, service):
        with pytest.raises(InvalidInputError):
            await service.resolve_duplicate_roots("keep-all")

    async def test_install_constraints_blocked_by_duplicates(
        self, service, db_session
    ):
        await self._drop_name_indexes(db_session)
        await self._insert_root(db_session, "Resistors", datetime(2024, 1, 1))
        await self._insert_root(db_session, "Resistors", datetime(2024, 2, 1))

        with pytest.raises(ConstraintViolationError) as exc_info:
            await service.install_category_constraints()

        duplicates = exc_info.value.details["duplicates"]
        assert duplicates[0]["name"] == "Resistors"
        assert duplicates[0]["count"] == 2

    async def test_install_constraints_with_fix(self, service, db_session):
        await self._drop_name_indexes(db_session)
        await self._insert_root(db_session, "Resistors", datetime(2024, 1, 1))
        await self._insert_root(db_session, "Resistors", datetime(2024, 2, 1))

        report = await service.install_category_constraints(fix=True)

        assert report.indexes == ["uq_category_root_name", "uq_category_parent_name"]
        assert report.resolution is not None
        assert report.resolution.groups_processed == 1
        assert await service.detect_duplicate_roots() == []

    async def test_installed_index_rejects_duplicate_root(self, service, db_session):
        await service.install_category_constraints()
        await self._insert_root(db_session, "Resistors", datetime(2024, 1, 1))

        with pytest.raises(IntegrityError):
            await self._insert_root(db_session, "Resistors", datetime(2024, 2, 1))
        await db_session.rollback()
