from __future__ import annotations

import datetime as dt
from enum import Enum

from .base import DocumentModel


class Employee(DocumentModel):
    """Employee profile as far as the engine needs it."""

    id: str
    name: str
    department: str
    role: str = ""
    admission_date: dt.date | None = None
    is_active: bool = True


class ActorRole(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    COLLABORATOR = "collaborator"


class ActorContext(DocumentModel):
    """Caller identity resolved by the authentication layer."""

    user_id: str
    role: ActorRole
    organization_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in (ActorRole.ADMIN, ActorRole.SUPERADMIN)
