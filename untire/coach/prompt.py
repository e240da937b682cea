"""
System prompt composer.

compose_system_prompt() is a pure function of the turn context, the tool
catalogs and the triggering message. No I/O, no clock, no randomness:
identical inputs always give a byte-identical prompt.

Section order:
  persona → static profile → dynamic profile → fatigue guidance →
  behavior type → agentic tools → conversation approach → response length →
  catalogs → brief-message override
"""

from typing import Optional

from ..stores.records import (
    PROFILE_FIELDS,
    TOOL_KINDS,
    BreathingEntry,
    ProfileRecord,
    ToolCatalogs,
    VideoEntry,
)
from .context import TurnContext

DEFAULT_PERSONA = (
    'You are "Untire Coach," a warm, empathetic AI companion for adults experiencing '
    "cancer-related fatigue. Your role is to have flowing, supportive conversations "
    "that help patients feel heard and understood. You are not a medical professional: "
    "you do not diagnose, prescribe, or give medical advice."
)

BRIEF_MESSAGES = frozenset({
    "hi", "hello", "hey", "ok", "okay", "yes", "no", "thanks", "thank you",
})
BRIEF_LENGTH = 10

# ── Fixed guidance blocks ────────────────────────────────────────────

BEHAVIOR_GUIDANCE = {
    "empathetic": (
        "- Use warm, empathetic language\n"
        "- Show deep understanding and validation\n"
        "- Be gentle and supportive"
    ),
    "practical": (
        "- Focus on actionable strategies\n"
        "- Be direct but kind\n"
        "- Offer concrete suggestions"
    ),
    "encouraging": (
        "- Use positive, uplifting language\n"
        "- Highlight progress and strengths\n"
        "- Be motivational"
    ),
}

TOOL_GUIDANCE = {
    "videos": (
        "- You can suggest meditation videos when the user expresses stress, anxiety, or overwhelm\n"
        "- Use the format: [VIDEO:title:embed_url] to embed videos in your response"
    ),
    "breathing": (
        "- You can suggest breathing exercises when the user needs quick stress relief or relaxation\n"
        "- Use the format: [BREATHING:title:duration:pattern:embed_code] to embed breathing exercises"
    ),
    "journaling": (
        "- You can suggest journaling prompts for self-reflection\n"
        "- Use the format: [JOURNAL:prompt_text]"
    ),
    "activity_tracking": (
        "- You can help track daily activities and energy levels\n"
        "- Use the format: [ACTIVITY:type:duration:energy_level]"
    ),
    "mood_tracking": (
        "- You can help track mood and emotional states\n"
        "- Use the format: [MOOD:emotion:intensity:notes]"
    ),
}

TOOL_USAGE_RULES = (
    "- Only suggest tools when genuinely helpful, not in every response\n"
    "- Detect emotional states like stress, anxiety, worry, overwhelm, panic\n"
    "- When suggesting a tool, briefly explain why it might help"
)

RESPONSE_LENGTH = {
    "low": "RESPONSE LENGTH: Keep responses brief (50-100 words)",
    "medium": "RESPONSE LENGTH: Keep responses conversational (100-180 words)",
    "high": "RESPONSE LENGTH: Provide detailed, comprehensive responses (150-250 words)",
}

RESPONSE_RULES = (
    "- Always end with a thoughtful question to continue the dialogue\n"
    "- Use empathetic language that shows you're listening\n"
    "- Be specific in your questions (not generic)\n"
    "- Adapt your energy and suggestions to match their fatigue level\n"
    "- Reference specific details from their profile when relevant to show you remember them\n"
    "- If the user gives a brief response or doesn't provide much detail, be proactive and "
    "suggest topics or ask about specific aspects of their life based on what you know"
)

MEDICAL_DISCLAIMER = (
    "IMPORTANT: This is educational support, not medical advice. Encourage them to "
    "discuss significant concerns with their healthcare team.\n\n"
    "Focus on creating a supportive dialogue rather than just giving advice."
)


def format_level(value: float) -> str:
    """8.0 → '8', 7.5 → '7.5'."""
    return f"{value:g}"


# ── Sections ─────────────────────────────────────────────────────────

def _profile_section(profile: Optional[ProfileRecord], accessible: tuple[str, ...]) -> str:
    if profile is None:
        return ""

    lines = []
    for name, label in PROFILE_FIELDS:
        if name not in accessible:
            continue
        value = getattr(profile, name)
        if value is None or value == "":
            continue
        if name == "current_fatigue_level":
            lines.append(f"- {label}: {format_level(value)}/10")
        else:
            lines.append(f"- {label}: {value}")

    if not lines:
        return ""
    return "USER PROFILE:\n" + "\n".join(lines)


def _dynamic_profile_section(text: str) -> str:
    if not text or not text.strip():
        return ""
    return (
        "DYNAMIC PROFILE (learned from conversations):\n"
        f"{text.strip()}\n\n"
        "Use this information to personalize your responses and remember important "
        "details about the user."
    )


def fatigue_tier(level: float) -> str:
    """critical / moderate_severe / moderate / mild. Lower bounds are inclusive."""
    if level >= 8.0:
        return "critical"
    if level >= 6.0:
        return "moderate_severe"
    if level >= 4.0:
        return "moderate"
    return "mild"


def _fatigue_section(level: Optional[float]) -> str:
    if level is None:
        return ""

    shown = format_level(level)
    tier = fatigue_tier(level)

    if tier == "critical":
        return (
            f"CRITICAL: The user's current fatigue level is {shown}/10, which indicates severe fatigue.\n"
            "- Be extra gentle and validating - they are likely struggling significantly\n"
            "- Focus on rest, self-compassion, and managing basic daily needs\n"
            "- Avoid suggesting activities that require energy\n"
            "- Emphasize that this level of fatigue is valid and they're not alone\n"
            "- Be patient if responses are brief or they seem withdrawn"
        )
    if tier == "moderate_severe":
        return (
            f"IMPORTANT: The user's current fatigue level is {shown}/10, indicating moderate-to-severe fatigue.\n"
            "- Acknowledge the significant impact this has on their daily life\n"
            "- Focus on gentle strategies and realistic expectations\n"
            "- Be understanding if they mention struggling with daily tasks\n"
            "- Encourage pacing and rest breaks\n"
            "- Validate the difficulty of managing moderate fatigue"
        )
    if tier == "moderate":
        return (
            f"The user's current fatigue level is {shown}/10, indicating moderate fatigue.\n"
            "- They may have some energy but still experience significant limitations\n"
            "- Balance encouragement with realistic expectations\n"
            "- Suggest gentle activities and pacing strategies\n"
            "- Acknowledge that even moderate fatigue can be challenging"
        )
    return (
        f"The user's current fatigue level is {shown}/10, indicating mild fatigue.\n"
        "- They may have more capacity for activities and strategies\n"
        "- Still be gentle and validate their experience\n"
        "- Can suggest more active coping strategies while respecting their limits"
    )


def _behavior_section(behavior_type: Optional[str]) -> str:
    key = behavior_type if behavior_type in BEHAVIOR_GUIDANCE else "empathetic"
    return f"BEHAVIOR TYPE: {key}\n{BEHAVIOR_GUIDANCE[key]}"


def _agentic_section(ctx: TurnContext) -> str:
    if not ctx.user_settings.tools_allowed:
        return ""

    enabled = set(ctx.ai_settings.enabled_tools)
    parts = ["AGENTIC FEATURES ENABLED:"]
    parts.extend(TOOL_GUIDANCE[kind] for kind in TOOL_KINDS if kind in enabled)
    parts.append(TOOL_USAGE_RULES)
    return "\n".join(parts)


def _approach_section(level: Optional[float]) -> str:
    lines = [
        "CONVERSATION APPROACH:",
        '- Be PROACTIVE: If the user doesn\'t provide much information or says something vague '
        'like "hello" or "hi", take the initiative to start meaningful topics',
        '- Use the dynamic profile to reference things you know about them (e.g., "How is your '
        'cat doing?" or "I remember you mentioned...")',
        "- Ask thoughtful follow-up questions to better understand their situation",
        "- Be genuinely curious about their daily experience, energy patterns, and challenges",
        "- Guide conversations naturally through topics like sleep, activity levels, emotional "
        "state, support systems",
        "- Offer gentle, practical strategies when appropriate",
        "- Always validate their feelings and experiences",
    ]
    if level is not None:
        lines.append(
            f"- Remember their current fatigue level ({format_level(level)}/10) "
            "and adapt your suggestions accordingly"
        )
    lines += [
        "- Update your understanding of the user based on what they share",
        "- When starting conversations or when user input is minimal, suggest specific topics "
        "or ask about things relevant to their profile",
    ]
    return "\n".join(lines)


def _length_section(verbosity: Optional[str]) -> str:
    return RESPONSE_LENGTH.get(verbosity, RESPONSE_LENGTH["medium"]) + "\n" + RESPONSE_RULES


def video_tag(video: VideoEntry) -> str:
    return f"[VIDEO:{video.title}:{video.embed_url}]"


def breathing_tag(exercise: BreathingEntry) -> str:
    duration = exercise.duration if exercise.duration is not None else 0
    return (
        f"[BREATHING:{exercise.title}:{duration}:"
        f"{exercise.pattern or ''}:{exercise.embed_code or ''}]"
    )


def _video_catalog_section(videos: tuple[VideoEntry, ...]) -> str:
    if not videos:
        return ""
    items = "\n\n".join(f"- {v.title}\n  Format: {video_tag(v)}" for v in videos)
    return (
        "AVAILABLE MEDITATION VIDEOS:\n"
        f"{items}\n\n"
        "WHEN TO USE VIDEOS:\n"
        "- User mentions stress, anxiety, overwhelm, racing thoughts\n"
        "- User needs help winding down or relaxing\n"
        "- User asks for guided exercises or meditation\n"
        "- After a difficult conversation, offer as a calming resource\n"
        "- User mentions insomnia or sleep difficulties\n\n"
        "HOW TO USE: Include the exact [VIDEO:title:embed_url] tag naturally in your response."
    )


def _breathing_catalog_section(exercises: tuple[BreathingEntry, ...]) -> str:
    if not exercises:
        return ""
    items = "\n\n".join(
        f"- {b.title} ({b.duration if b.duration is not None else '?'}s)\n"
        f"  Pattern: {b.pattern or ''}\n"
        f"  Format: {breathing_tag(b)}"
        for b in exercises
    )
    return (
        "AVAILABLE BREATHING EXERCISES:\n"
        f"{items}\n\n"
        "WHEN TO USE BREATHING EXERCISES:\n"
        "- User mentions anxiety, panic, or feeling overwhelmed\n"
        "- Quick relief for immediate stress\n"
        "- User feels tense or restless\n"
        "- Before bed for better sleep\n"
        "- During fatigue spikes for an energy reset\n\n"
        "HOW TO USE: Include the exact [BREATHING:title:duration:pattern:embed_code] tag "
        "in your response."
    )


def is_brief_message(message: str) -> bool:
    text = message.strip()
    return text.casefold() in BRIEF_MESSAGES or len(text) < BRIEF_LENGTH


def _brief_override_section(message: Optional[str], has_prior_turns: bool) -> str:
    if message is None or not has_prior_turns or not is_brief_message(message):
        return ""
    return (
        f'NOTE: The user\'s last message was brief or vague ("{message}"). Be PROACTIVE - '
        "start a meaningful topic, reference something from their profile, or ask about "
        "specific aspects of their day/energy/situation. Don't just acknowledge - engage!"
    )


# ── Composer ─────────────────────────────────────────────────────────

def compose_system_prompt(
    ctx: TurnContext,
    catalogs: Optional[ToolCatalogs] = None,
    message: Optional[str] = None,
    has_prior_turns: bool = False,
) -> str:
    catalogs = catalogs or ToolCatalogs()
    ai = ctx.ai_settings
    level = ctx.effective_fatigue_level

    sections = [
        ai.system_prompt if ai.system_prompt and ai.system_prompt.strip() else DEFAULT_PERSONA,
        _profile_section(ctx.profile, ai.accessible_user_fields),
        _dynamic_profile_section(ctx.dynamic_profile),
        _fatigue_section(level),
        _behavior_section(ctx.user_settings.behavior_type),
        _agentic_section(ctx),
        _approach_section(level),
        _length_section(ai.verbosity),
        MEDICAL_DISCLAIMER,
        _video_catalog_section(catalogs.videos),
        _breathing_catalog_section(catalogs.breathing),
        _brief_override_section(message, has_prior_turns),
    ]
    return "\n\n".join(s for s in sections if s)
