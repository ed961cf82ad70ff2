"""Pydantic base model for everything that crosses the wire.

Python attributes are snake_case; JSON keys are camelCase. Models accept
either form on input and always emit camelCase from :meth:`CamelModel.to_json`.
Unknown upstream fields are ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Immutable, camelCase-serialising model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_json(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class HistoricalPoint(CamelModel):
    date: str = ""
    value: float = 0.0


__all__ = ["CamelModel", "HistoricalPoint"]
