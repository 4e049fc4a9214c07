from __future__ import annotations

import os


class FilesystemProbe:
    """Existence checks and home-relative path expansion."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def expand_home(self, path: str) -> str:
        return os.path.abspath(os.path.expanduser(path))
