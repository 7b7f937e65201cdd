"""Browser automation module using Playwright."""

from .manager import BrowserManager
from .context import PageContext, ActionResult

__all__ = ["BrowserManager", "PageContext", "ActionResult"]
