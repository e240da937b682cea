"""
Guardrails — input/output validation layer.

Layers:
  1. Input validation (empty, length)
  2. Injection patterns (logged, not blocked)
  3. Output validation (response length)
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# ── Configuration ─────────────────────────────────────────────────────

MAX_MESSAGE_LENGTH = 10000       # Max input message length
MAX_RESPONSE_LENGTH = 20000      # Max model reply length

INJECTION_PATTERNS = [
    r"ignore\s+(all\s+)?previous\s+instructions",
    r"ignore\s+(all\s+)?above",
    r"disregard\s+(all\s+)?previous",
    r"you\s+are\s+now\s+(?:a|an)\s+",
    r"<\s*system\s*>",
]


@dataclass
class GuardrailResult:
    """Result of a guardrail check."""
    allowed: bool
    reason: Optional[str] = None
    modified_input: Optional[str] = None


# ── Input Guardrails ──────────────────────────────────────────────────

def check_input(message: str, user_id: str = "") -> GuardrailResult:
    """
    Validate user input before processing.
    Returns GuardrailResult with allowed=False if blocked.
    """
    if not message or not message.strip():
        return GuardrailResult(allowed=False, reason="Missing required field: message")

    if len(message) > MAX_MESSAGE_LENGTH:
        return GuardrailResult(
            allowed=False,
            reason=f"Message too long ({len(message)} chars). Maximum is {MAX_MESSAGE_LENGTH}.",
        )

    msg_lower = message.lower()
    for pattern in INJECTION_PATTERNS:
        if re.search(pattern, msg_lower):
            # Logged only; the persona handles it
            logger.warning("Potential injection detected from user=%s: %s", user_id, message[:100])
            break

    return GuardrailResult(allowed=True)


# ── Output Guardrails ─────────────────────────────────────────────────

def check_output(response: str) -> GuardrailResult:
    """Truncate excessively long model replies."""
    if len(response) > MAX_RESPONSE_LENGTH:
        logger.warning("Model reply truncated from %d chars", len(response))
        return GuardrailResult(
            allowed=True,
            modified_input=response[:MAX_RESPONSE_LENGTH] + "\n\n[Response truncated due to length]",
        )
    return GuardrailResult(allowed=True)
