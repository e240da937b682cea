"""
Dynamic profile updater.

After a turn is saved, the coach may enqueue a ProfileUpdateJob. A single
background worker drains the queue: it asks a secondary model call to
re-derive the user's dynamic profile from recent conversation and writes
the result if it is non-empty and different from what the turn saw.

Best effort throughout:
  - the turn never waits on the queue
  - a full queue drops the job (logged)
  - extraction or write failures are logged, never raised
  - writes are last-writer-wins; two overlapping jobs for one user may land
    in either order
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.config import get_settings
from ..core.database import session_scope
from ..services import llm, realtime
from ..stores.sql import SqlProfileStore

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20
MIN_MESSAGES_FOR_UPDATE = 4

EXTRACTION_SYSTEM = (
    "You are a profile extraction assistant. "
    "Extract factual information from conversations."
)

Extractor = Callable[[list[dict], str], Awaitable[str]]


# ── Policy ───────────────────────────────────────────────────────────

def should_update_profile(message_count: int, memory_enabled: bool) -> bool:
    """Every completed user+assistant pair from the second one on."""
    return (
        memory_enabled
        and message_count >= MIN_MESSAGES_FOR_UPDATE
        and message_count % 2 == 0
    )


def should_write(candidate: Optional[str], current: Optional[str]) -> bool:
    if not candidate or not candidate.strip():
        return False
    return candidate.strip() != (current or "").strip()


# ── Extraction ───────────────────────────────────────────────────────

def build_extraction_prompt(history: list[dict], current_profile: str) -> str:
    transcript = "\n".join(
        f"{'User' if m['role'] == 'user' else 'Coach'}: {m['content']}"
        for m in history[-HISTORY_LIMIT:]
    )
    return (
        "Analyze the following conversation and extract key information about the user. "
        "Update or create a profile that includes:\n"
        "- Personal details mentioned (family, work, hobbies, interests)\n"
        "- Health-related information (treatment stage, symptoms, medications mentioned)\n"
        "- Emotional patterns and coping strategies\n"
        "- Preferences and dislikes\n"
        "- Support systems mentioned\n"
        "- Daily routines or challenges\n"
        "- Goals or concerns expressed\n\n"
        f"Current profile: {current_profile or 'None'}\n\n"
        f"Conversation:\n{transcript}\n\n"
        "Return ONLY a concise profile summary (max 300 words) that captures the most "
        "important information about this user. Focus on facts and patterns, not interpretations."
    )


async def extract_dynamic_profile(history: list[dict], current_profile: str) -> str:
    """
    Secondary model call. Returns the current profile unchanged when no
    provider is configured, so nothing gets written.
    """
    if not llm.is_configured():
        return current_profile or ""

    settings = get_settings()
    text = await llm.chat_simple(
        build_extraction_prompt(history, current_profile),
        system=EXTRACTION_SYSTEM,
        model=settings.extraction_model,
        temperature=settings.extraction_temperature,
        max_tokens=settings.extraction_max_tokens,
    )
    return text.strip()


# ── Worker ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProfileUpdateJob:
    user_id: str
    chat_id: str
    history: list[dict] = field(default_factory=list)  # last 20, oldest first
    current_profile: str = ""


class DynamicProfileUpdater:
    """Bounded queue plus one consumer task."""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        extractor: Optional[Extractor] = None,
        maxsize: Optional[int] = None,
    ):
        if maxsize is None:
            maxsize = get_settings().profile_queue_size
        self._session_factory = session_factory
        self._extractor = extractor or extract_dynamic_profile
        self._queue: asyncio.Queue[ProfileUpdateJob] = asyncio.Queue(maxsize=maxsize)
        self._worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def submit(self, job: ProfileUpdateJob) -> bool:
        """Enqueue without waiting. False if the job was dropped."""
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning(
                "Profile update queue full, dropping job for user=%s chat=%s",
                job.user_id, job.chat_id,
            )
            return False
        logger.debug("Profile update queued for user=%s (pending=%d)", job.user_id, self.pending)
        return True

    async def process(self, job: ProfileUpdateJob) -> bool:
        """Run one job. True if a new profile was written."""
        try:
            candidate = await self._extractor(job.history, job.current_profile)
        except Exception as e:
            logger.warning("Profile extraction failed for user=%s: %s", job.user_id, e)
            return False

        if not should_write(candidate, job.current_profile):
            logger.debug("Profile unchanged for user=%s, skipping write", job.user_id)
            return False

        text = candidate.strip()
        try:
            async with session_scope(self._session_factory) as db:
                await SqlProfileStore(db).set_dynamic_profile(job.user_id, text)
        except Exception as e:
            logger.error("Profile write failed for user=%s: %s", job.user_id, e)
            return False

        logger.info("Dynamic profile updated for user=%s (%d chars)", job.user_id, len(text))
        await realtime.profile_updated(job.user_id, {"chat_id": job.chat_id})
        return True

    async def run_pending(self) -> int:
        """Drain whatever is queued right now. Returns the number of jobs run."""
        count = 0
        while not self._queue.empty():
            job = self._queue.get_nowait()
            try:
                await self.process(job)
            finally:
                self._queue.task_done()
            count += 1
        return count

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.process(job)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="dynamic-profile-updater")
        logger.info("Dynamic profile updater started")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("Dynamic profile updater stopped (%d jobs left unprocessed)", self.pending)


_updater: Optional[DynamicProfileUpdater] = None


def get_profile_updater() -> DynamicProfileUpdater:
    global _updater
    if _updater is None:
        _updater = DynamicProfileUpdater()
    return _updater
