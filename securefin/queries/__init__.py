"""Dashboard query package."""

from securefin.queries.dashboard import (
    FALLBACK_ADVICE,
    NO_HISTORY_ADVICE,
    DashboardQuery,
    GoalProgress,
)

__all__ = [
    "DashboardQuery",
    "GoalProgress",
    "NO_HISTORY_ADVICE",
    "FALLBACK_ADVICE",
]
