"""Shared shapes for manufacturers and suppliers."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompanyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    website_url: Optional[str] = Field(None, max_length=512)
    logo_url: Optional[str] = Field(None, max_length=512)
    contact_info: Optional[Dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class CompanyCreate(CompanyBase):
    custom_fields: Optional[Dict[str, Any]] = None


class CompanyUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    website_url: Optional[str] = Field(None, max_length=512)
    logo_url: Optional[str] = Field(None, max_length=512)
    contact_info: Optional[Dict[str, Any]] = None
    custom_fields: Optional[Dict[str, Any]] = None


class CompanyResponse(CompanyBase):
    id: int
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    custom_fields: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)
