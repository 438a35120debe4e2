from __future__ import annotations

from enum import Enum

from .base import DocumentModel


class TieBreaker(str, Enum):
    ZEROS = "zeros"
    ADMISSION_DATE = "admissionDate"
    MANUAL = "manual"


class NotificationLevel(str, Enum):
    NONE = "none"
    TOP3 = "top3"
    SIGNIFICANT = "significant"
    ALL = "all"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class RankingSettings(DocumentModel):
    """Per-organization ranking configuration."""

    tie_breaker: TieBreaker = TieBreaker.ZEROS
    include_probation: bool = False
    public_view_enabled: bool = True
    notification_level: NotificationLevel = NotificationLevel.TOP3


class RankingEntry(DocumentModel):
    """One row of a computed leaderboard; derived, never stored."""

    rank: int
    employee_id: str
    score: int
    zeros: int
    trend: Trend = Trend.STABLE
    employee_name: str | None = None
    department: str | None = None
