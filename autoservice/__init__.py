"""
Autoservice core

Civil-time helpers and the unsaved-changes navigation guard used by the
vehicle-service web front-end.
"""

from autoservice.models import CivilTimestamp, PromptContent
from autoservice.navigation_guard import GuardState, NavigationGuard, PromptChoice
from autoservice.timezone_utils import (
    InvalidFormatError,
    current_civil_instant,
    current_date,
    current_time,
    format_civil_date,
    parse_civil_datetime,
    week_start,
)

__version__ = "0.1.0"
__all__ = [
    "CivilTimestamp",
    "PromptContent",
    "GuardState",
    "NavigationGuard",
    "PromptChoice",
    "InvalidFormatError",
    "current_civil_instant",
    "current_date",
    "current_time",
    "format_civil_date",
    "parse_civil_datetime",
    "week_start",
]
