"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ProjectId and UserId wrap store-assigned integers
    - Grid cells are color strings; DEFAULT_COLOR is the background fill
    - FLAG_THRESHOLD is the flag count at which a project enters moderation review
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from datetime import timedelta
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ProjectId = NewType("ProjectId", int)
UserId = NewType("UserId", int)


# ─── Value Types ─────────────────────────────────────────────────

Color = NewType("Color", str)
Grid = list[list[Color]]

DEFAULT_COLOR = Color("#FFF")
FLAG_THRESHOLD = 2
MIN_RATING = 1
MAX_RATING = 10


# ─── Enums ───────────────────────────────────────────────────────

class TimerSelector(str, Enum):
    """Countdown chosen at project creation. UNLIMITED carries no deadline."""
    ONE_MINUTE = "1min"
    THREE_MINUTES = "3min"
    FIVE_MINUTES = "5min"
    FIFTEEN_MINUTES = "15min"
    ONE_HOUR = "1hour"
    ONE_DAY = "1day"
    UNLIMITED = "unlimited"

    @property
    def duration(self) -> timedelta | None:
        return _TIMER_DURATIONS[self]


_TIMER_DURATIONS: dict[TimerSelector, timedelta | None] = {
    TimerSelector.ONE_MINUTE: timedelta(minutes=1),
    TimerSelector.THREE_MINUTES: timedelta(minutes=3),
    TimerSelector.FIVE_MINUTES: timedelta(minutes=5),
    TimerSelector.FIFTEEN_MINUTES: timedelta(minutes=15),
    TimerSelector.ONE_HOUR: timedelta(hours=1),
    TimerSelector.ONE_DAY: timedelta(days=1),
    TimerSelector.UNLIMITED: None,
}


class ProjectStatus(str, Enum):
    """Project lifecycle states. ACTIVE -> FINISHED only."""
    ACTIVE = "active"
    FINISHED = "finished"


class GalleryMode(str, Enum):
    """Gallery views. Unknown mode strings map to an empty gallery."""
    RATING = "rating"
    NEW = "new"
    MY_GALLERY = "myGallery"
    FLAGGED = "flagged"
