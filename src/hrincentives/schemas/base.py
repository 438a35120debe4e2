"""Shared pydantic base for persisted records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Immutable record whose persisted shape uses camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    def to_document(self) -> dict[str, Any]:
        """Return the persisted (camelCase, JSON-safe) representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
