"""Shared pydantic base for schemas read from the database."""

from collections.abc import Iterable
from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Schema that validates from ORM attributes and strips string whitespace."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )

    @classmethod
    def from_model(cls, obj: Any) -> Self:
        """Build from a SQLAlchemy model instance."""
        return cls.model_validate(obj)

    @classmethod
    def from_models(cls, objs: Iterable[Any]) -> list[Self]:
        return [cls.model_validate(obj) for obj in objs]
