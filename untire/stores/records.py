"""
Read-only views of stored rows, handed to the coaching core.

The core never sees ORM objects; stores convert rows into these frozen
dataclasses so a TurnContext cannot be mutated halfway through a turn.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

BEHAVIOR_TYPES = ("empathetic", "practical", "encouraging")
TOOL_KINDS = ("videos", "breathing", "journaling", "activity_tracking", "mood_tracking")
VERBOSITY_LEVELS = ("low", "medium", "high")

# Ordered (field, label) pairs; this order is the order lines appear in the prompt
PROFILE_FIELDS = (
    ("name", "Name"),
    ("age", "Age"),
    ("gender", "Gender"),
    ("ethnicity", "Ethnicity"),
    ("cancer_type", "Cancer Type"),
    ("treatment_stage", "Treatment Stage"),
    ("diagnosis_date", "Diagnosis Date"),
    ("current_fatigue_level", "Typical fatigue level"),
    ("location", "Location"),
    ("support_system", "Support System"),
)
PROFILE_FIELD_NAMES = tuple(name for name, _ in PROFILE_FIELDS)

DEFAULT_ENABLED_TOOLS = ("videos", "breathing", "journaling", "activity_tracking")


@dataclass(frozen=True)
class ProfileRecord:
    user_id: str
    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    ethnicity: Optional[str] = None
    cancer_type: Optional[str] = None
    treatment_stage: Optional[str] = None
    diagnosis_date: Optional[str] = None
    current_fatigue_level: Optional[float] = None
    location: Optional[str] = None
    support_system: Optional[str] = None
    last_fatigue_asked_date: Optional[date] = None
    dynamic_profile: str = ""


@dataclass(frozen=True)
class UserSettingsRecord:
    user_id: str
    behavior_type: str = "empathetic"
    agentic_features: bool = True
    chat_only: bool = False

    @property
    def tools_allowed(self) -> bool:
        """Tool suggestions need the agentic flag and a non chat-only session."""
        return self.agentic_features and not self.chat_only


@dataclass(frozen=True)
class AISettingsRecord:
    model: str
    temperature: float = 0.8
    max_tokens: int = 500
    system_prompt: Optional[str] = None
    enabled_tools: tuple[str, ...] = DEFAULT_ENABLED_TOOLS
    verbosity: str = "medium"
    memory_enabled: bool = True
    accessible_user_fields: tuple[str, ...] = PROFILE_FIELD_NAMES


@dataclass(frozen=True)
class ChatRecord:
    id: str
    user_id: str
    title: Optional[str] = None
    initial_fatigue_level: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class MessageRecord:
    id: str
    chat_id: str
    role: str
    content: str
    sequence_number: int
    media: Optional[dict] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class VideoEntry:
    id: str
    title: str
    embed_url: str
    url: str = ""
    category: Optional[str] = None
    tags: Optional[str] = None


@dataclass(frozen=True)
class BreathingEntry:
    id: str
    title: str
    duration: Optional[int] = None
    pattern: Optional[str] = None
    embed_code: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ToolCatalogs:
    """What the model may suggest this turn. Empty tuples mean nothing to offer."""

    videos: tuple[VideoEntry, ...] = field(default_factory=tuple)
    breathing: tuple[BreathingEntry, ...] = field(default_factory=tuple)

    @property
    def empty(self) -> bool:
        return not self.videos and not self.breathing
