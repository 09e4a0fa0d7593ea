"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_ai_stylist,
    check_database,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_ai_stylist",
    "check_database",
    "run_all_checks",
]
