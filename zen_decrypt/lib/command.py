from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

# Shell convention for "command could not be executed".
EXEC_FAILED = 127


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr joined, for substring checks over everything a tool printed."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(argv: Sequence[str]) -> CmdResult:
    """Run a command to completion with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr; they are logged at DEBUG.
    - Never raises for a failing command: a binary that cannot be executed
      is reported as returncode 127 with the OS error in stderr.
    - No timeout. Interactive tools (password prompts) block until answered.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        logger.debug("EXEC FAILED %s: %s", argv_list[0], e)
        return CmdResult(argv=argv_list, returncode=EXEC_FAILED, stdout="", stderr=str(e))

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


def spawn_cmd(argv: Sequence[str]) -> Optional[int]:
    """Start a command detached from this process and return its pid.

    The child gets its own session and no pipes; it is never waited on.
    Returns None if the process could not be started.
    """

    argv_list = list(argv)
    logger.info("SPAWN %s", _fmt_argv(argv_list))

    try:
        p = subprocess.Popen(
            argv_list,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        logger.debug("SPAWN FAILED %s: %s", argv_list[0], e)
        return None

    return p.pid
