from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import blank_to_none

# --------------------------------------------------------------
# Category Schemas
# --------------------------------------------------------------


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Resistors"])
    parent_id: Optional[int] = Field(None, examples=[1])
    description: Optional[str] = None
    is_public: bool = True

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent_id(cls, value: Any) -> Any:
        return blank_to_none(value)


class CategoryUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    parent_id: Optional[int] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent_id(cls, value: Any) -> Any:
        return blank_to_none(value)


class CategoryMove(BaseModel):
    # None (or "") moves the category to the root level
    parent_id: Optional[int] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent_id(cls, value: Any) -> Any:
        return blank_to_none(value)


class CategoryResponse(BaseModel):
    id: int
    name: str
    parent_id: Optional[int] = None
    path: Optional[str] = None
    description: Optional[str] = None
    is_public: bool
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None
    depth: int = 0
    is_orphaned: bool = False

    model_config = ConfigDict(from_attributes=True)


class CategoryTreeNode(CategoryResponse):
    children: List["CategoryTreeNode"] = Field(default_factory=list)


class CategoryBreadcrumb(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class CategoryListResponse(BaseModel):
    items: List[CategoryResponse]
    total: int
    limit: int
    offset: int


class CategoryCustomFields(BaseModel):
    fields: Dict[str, Any] = Field(default_factory=dict, examples=[{"voltage": 5}])


# --------------------------------------------------------------
# Duplicate maintenance Schemas
# --------------------------------------------------------------


class DuplicateMember(BaseModel):
    id: int
    created_at: datetime
    created_by: Optional[int] = None


class DuplicateGroup(BaseModel):
    name: str
    count: int
    members: List[DuplicateMember]


class DuplicateResolveRequest(BaseModel):
    strategy: str = Field("keep-newest", examples=["keep-newest", "keep-oldest"])


class CategoryRename(BaseModel):
    id: int
    old_name: str
    new_name: str


class DuplicateResolutionReport(BaseModel):
    strategy: str
    groups_processed: int = 0
    kept_ids: List[int] = Field(default_factory=list)
    renamed: List[CategoryRename] = Field(default_factory=list)


class ConstraintInstallRequest(BaseModel):
    fix: bool = False


class ConstraintInstallReport(BaseModel):
    indexes: List[str]
    resolution: Optional[DuplicateResolutionReport] = None
