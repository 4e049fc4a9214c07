from __future__ import annotations

import argparse
import logging
import os
from typing import Optional

from .lib.env import PATHS
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .workflow import EXIT_FAILED, WorkflowCtx, run_workflow
from .workflow_config import WorkflowConfig, load_workflow_config

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = PATHS.config_default


def resolve_config(config_path: Optional[str]) -> WorkflowConfig:
    """Load an explicit config, else the default file if present, else built-in defaults."""

    if config_path is not None:
        return load_workflow_config(config_path)
    if os.path.exists(os.path.expanduser(DEFAULT_CONFIG_PATH)):
        return load_workflow_config(DEFAULT_CONFIG_PATH)
    return WorkflowConfig()


def load_config_or_none(config_path: Optional[str]) -> Optional[WorkflowConfig]:
    try:
        return resolve_config(config_path)
    except FileNotFoundError as e:
        logger.error("Config file not found: %s", e)
    except ValueError as e:
        logger.error("Invalid config: %s", e)
    return None


def run(*, config_path: Optional[str] = None, log_path: str = DEFAULT_LOG_PATH, verbose: bool = False) -> int:
    """Run the decrypt-and-launch workflow once and return the process exit code."""

    configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)

    cfg = load_config_or_none(config_path)
    if cfg is None:
        return EXIT_FAILED

    logger.info("--- Starting zen-decrypt ---")
    result = run_workflow(ctx=WorkflowCtx.from_config(cfg))
    logger.info("--- zen-decrypt finished (exit %s, branch=%s) ---", result.exit_code, result.branch)
    return result.exit_code


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="zen-decrypt",
        description="Mount the encrypted profile image, run the browser on it, then eject it.",
    )
    p.add_argument("--config", default=None, help=f"Path to YAML config (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("-v", "--verbose", action="store_true", help="Log command output at DEBUG level")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return run(config_path=args.config, log_path=args.log, verbose=bool(args.verbose))


if __name__ == "__main__":
    raise SystemExit(main())
