"""
FastAPI application factory.
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse, HTMLResponse

from .core.config import get_settings
from .core.database import init_db, close_db, session_scope
from .core.redis import close_redis
from .api.router import router

logger = logging.getLogger(__name__)

# Frontend files live next to the package
BASE_DIR = Path(__file__).resolve().parent.parent
STATIC_DIR = BASE_DIR / "static"


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Untire Coach",
        description="Conversational support for cancer-related fatigue",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Static files ─────────────────────────────────────────────
    if STATIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting Untire Coach (env=%s)", settings.env)

        # Create database tables
        await init_db()

        # Admin account from ADMIN_USERNAME / ADMIN_PASSWORD
        from .core.auth import bootstrap_admin
        async with session_scope() as db:
            await bootstrap_admin(db)

        # Background dynamic-profile worker
        from .coach.profile_updater import get_profile_updater
        get_profile_updater().start()

        # Log feature flag state
        from .core.flags import get_flags
        from .services.llm import is_configured
        flags = get_flags()
        logger.info(
            "Flags: session_auth=%s redis=%s llm=%s (configured=%s)",
            flags.use_session_auth, flags.use_redis,
            flags.llm_provider, is_configured(),
        )
        if not is_configured():
            logger.warning("No LLM API key configured, replies will use the fallback message")

        logger.info("Untire Coach is ready")

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        from .coach.profile_updater import get_profile_updater
        from .services.llm import close_client
        await get_profile_updater().stop()
        await close_client()
        await close_db()
        await close_redis()
        logger.info("Untire Coach shut down")

    # ── Frontend ─────────────────────────────────────────────────
    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def index():
        """Serve the single-page frontend."""
        html_path = STATIC_DIR / "index.html"
        if html_path.exists():
            return FileResponse(html_path)
        return HTMLResponse(content="<h1>Untire Coach is running.</h1><p>Frontend not found.</p>")

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
