"""SQLite persistence for users, message turns, inference records and ideas."""

from .database import Storage
from .models import Idea, IdeaFolder, InferenceRecord, MessageTurn, User

__all__ = [
    "Idea",
    "IdeaFolder",
    "InferenceRecord",
    "MessageTurn",
    "Storage",
    "User",
]
