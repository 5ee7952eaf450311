"""Project model for upload destinations."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from .base import BaseModel


class Project(BaseModel):
    """Project the current user may upload into."""

    number: str = Field(..., description="Project number, e.g. 3010000.01")

    @field_validator("number", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        # Some servers send numeric project numbers
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @classmethod
    def table_columns(cls) -> list[str]:
        """Return columns for table output."""
        return ["number"]
