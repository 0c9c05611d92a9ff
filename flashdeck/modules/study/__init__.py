"""Study session exports."""

from .models import Card, Progress, SessionState, StudyView
from .session import advance, current_card, flip, last_card, progress, start, view

__all__ = [
    "Card",
    "Progress",
    "SessionState",
    "StudyView",
    "start",
    "flip",
    "advance",
    "current_card",
    "last_card",
    "progress",
    "view",
]
