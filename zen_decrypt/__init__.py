"""Zen profile decrypt-and-launch.

Core design goals:
- One linear run: mount, browse, eject
- External tools (hdiutil, open) treated as black boxes
- Explicit results instead of exceptions across modules
- Fallback to the personal profile when the password prompt is cancelled
- Centralized logging
"""

__all__ = []
