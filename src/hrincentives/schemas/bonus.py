from __future__ import annotations

from pydantic import Field

from .base import DocumentModel


class BonusConfig(DocumentModel):
    """Organization bonus rule: base value paid while zeros stay within the limit."""

    base_value: float = Field(default=100.0, ge=0)
    zero_limit: int = Field(default=3, ge=0)
