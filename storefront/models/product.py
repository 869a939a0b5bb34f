"""Product models for the storefront"""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

UNCATEGORIZED = "Uncategorized"


def normalize_flag(value: Any) -> bool:
    """
    Collapse the directory's flag encodings into a strict bool.

    Only True, 1 and "true" count as set; anything else is False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return value == "true"


class Product(BaseModel):
    """Product in the directory"""
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    image: Optional[str] = None
    available: bool = Field(
        default=False,
        validation_alias=AliasChoices("available", "isAvailable"),
    )
    on_offer: bool = Field(
        default=False,
        validation_alias=AliasChoices("onOffer", "on_offer"),
    )
    category: str = UNCATEGORIZED
    manufacturing_date: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("manufacturingDate", "manufacturing_date"),
    )
    expiry_date: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("expiryDate", "expiry_date"),
    )
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "created_at"),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
    )

    class Config:
        from_attributes = True
        frozen = True

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Some directories hand out numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("available", "on_offer", mode="before")
    @classmethod
    def _normalize_flags(cls, value: Any) -> bool:
        return normalize_flag(value)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> str:
        if isinstance(value, dict):
            value = value.get("name")
        if not value:
            return UNCATEGORIZED
        return str(value)

    @field_validator(
        "manufacturing_date", "expiry_date", "created_at", "updated_at", mode="before"
    )
    @classmethod
    def _blank_dates(cls, value: Any) -> Any:
        if value == "":
            return None
        return value
