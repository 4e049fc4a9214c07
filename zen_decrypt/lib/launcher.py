from __future__ import annotations

import logging
from typing import List, Sequence

from .command import EXEC_FAILED, run_cmd, spawn_cmd
from .env import PATHS

logger = logging.getLogger(__name__)


def build_open_argv(open_bin: str, target: str, *, args: Sequence[str] = (), wait: bool = False) -> List[str]:
    argv = [open_bin]
    if wait:
        # -W: block until the application quits.
        argv.append("-W")
    argv.append(target)
    if args:
        argv += ["--args", *args]
    return argv


class AppLauncher:
    """Open applications (or documents) through the OS `open` facility."""

    def __init__(self, open_bin: str = PATHS.open_bin) -> None:
        self.open_bin = open_bin

    def open(self, target: str, *, args: Sequence[str] = (), wait: bool = False) -> int:
        """Open target and return an exit status.

        wait=True blocks until the application exits and returns its status.
        wait=False starts a detached `open` and returns 0 once it is running,
        127 if it could not be started.
        """

        argv = build_open_argv(self.open_bin, target, args=args, wait=wait)
        if wait:
            r = run_cmd(argv)
            if not r.ok and r.stderr:
                logger.debug("open stderr: %s", r.stderr.strip())
            return r.returncode

        pid = spawn_cmd(argv)
        return EXEC_FAILED if pid is None else 0
