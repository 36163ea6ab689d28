from datetime import datetime

from sqlalchemy import TEXT, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BomServiceBaseModel

ROOT_NAME_INDEX = "uq_category_root_name"
PARENT_NAME_INDEX = "uq_category_parent_name"

_ROOT_WHERE = text("parent_id IS NULL AND is_deleted = false")
_CHILD_WHERE = text("is_deleted = false")


class Category(BomServiceBaseModel):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id"), nullable=True, index=True
    )
    # Dot-joined ancestor ids ending with this category's id, e.g. "3.17.42"
    path: Mapped[str | None] = mapped_column(String(1024), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    is_public: Mapped[bool] = mapped_column(default=True, nullable=False)

    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    updated_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=False), nullable=True
    )
    deleted_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        Index(
            ROOT_NAME_INDEX,
            "name",
            unique=True,
            sqlite_where=_ROOT_WHERE,
            postgresql_where=_ROOT_WHERE,
        ),
        Index(
            PARENT_NAME_INDEX,
            "parent_id",
            "name",
            unique=True,
            sqlite_where=_CHILD_WHERE,
            postgresql_where=_CHILD_WHERE,
        ),
    )

    @property
    def ancestor_ids(self) -> list[int]:
        """Ids on the materialized path above this category, root first."""
        if not self.path:
            return []
        return [int(part) for part in self.path.split(".")[:-1]]

    @property
    def depth(self) -> int:
        return len(self.ancestor_ids)
