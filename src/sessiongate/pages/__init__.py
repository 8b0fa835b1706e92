"""NiceGUI pages for SessionGate.

Import this module to register all page routes with NiceGUI.
"""

from sessiongate.pages import auth, dashboard

__all__ = ["auth", "dashboard"]

# Touch modules to prevent linter from removing "unused" imports.
# These imports register @ui.page decorators as a side effect.
_PAGES = (auth, dashboard)
