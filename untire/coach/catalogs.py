"""
Tool catalog provider: which videos and breathing exercises the model may
suggest this turn.
"""

from ..stores.base import CatalogStore
from ..stores.records import ToolCatalogs
from .context import TurnContext


async def provide_tool_catalogs(ctx: TurnContext, catalog: CatalogStore) -> ToolCatalogs:
    """Full catalogs for each globally enabled kind, or nothing if tools are off."""
    if not ctx.user_settings.tools_allowed:
        return ToolCatalogs()

    enabled = ctx.ai_settings.enabled_tools
    videos = await catalog.list_videos() if "videos" in enabled else []
    breathing = await catalog.list_breathing() if "breathing" in enabled else []
    return ToolCatalogs(videos=tuple(videos), breathing=tuple(breathing))
