"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import RecordBase
from .user import User, UserSession
from .profile import Profile
from .settings import UserSettings, AISettings
from .conversation import Chat, Message, ImmutableFieldError
from .catalog import Video, BreathingExercise
from .quiz import FatigueQuizQuestion
from .memory import SavedMemory

__all__ = [
    "RecordBase",
    "User", "UserSession",
    "Profile",
    "UserSettings", "AISettings",
    "Chat", "Message", "ImmutableFieldError",
    "Video", "BreathingExercise",
    "FatigueQuizQuestion",
    "SavedMemory",
]
