"""
Main API router. Mounts all sub-routers under /api.
"""

from fastapi import APIRouter

from ..core.config import get_settings
from ..core.flags import get_flags
from ..services import llm

router = APIRouter(prefix="/api")


# ── Health (no auth) ─────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "untire-coach",
        "env": get_settings().env,
        "llm_provider": get_flags().llm_provider,
        "llm_configured": llm.is_configured(),
    }


# ── Routes (auth enforced per endpoint) ──────────────────────────────

from .auth import auth_router
from .chat import chat_router
from .chats import chats_router
from .profile import profile_router
from .settings import settings_router
from .catalog import catalog_router
from .quiz import quiz_router
from .memories import memories_router
from .admin import admin_router

router.include_router(auth_router)
router.include_router(chat_router)
router.include_router(chats_router)
router.include_router(profile_router)
router.include_router(settings_router)
router.include_router(catalog_router)
router.include_router(quiz_router)
router.include_router(memories_router)
router.include_router(admin_router)
