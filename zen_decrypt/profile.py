from __future__ import annotations

import argparse
import logging
from typing import Optional

from .lib.fsprobe import FilesystemProbe
from .lib.launcher import AppLauncher
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .main import DEFAULT_CONFIG_PATH, load_config_or_none
from .workflow import EXIT_FAILED, EXIT_OK
from .workflow_config import WorkflowConfig

logger = logging.getLogger(__name__)


def open_image(*, cfg: WorkflowConfig, launcher: AppLauncher, probe: FilesystemProbe) -> int:
    """Hand the disk image to the OS default handler, which prompts and mounts it."""

    image_path = probe.expand_home(cfg.image_path)
    if not probe.exists(image_path):
        logger.error("Disk image not found at %s", image_path)
        return EXIT_FAILED

    status = launcher.open(image_path, wait=False)
    if status != 0:
        logger.error("Failed to open %s (status %s)", image_path, status)
        return EXIT_FAILED
    logger.info("Opened %s", image_path)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="zen-profile", description="Open the profile disk image with the default handler.")
    p.add_argument("--config", default=None, help=f"Path to YAML config (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH)

    args = p.parse_args(argv)

    configure_logging(log_path=args.log)
    cfg = load_config_or_none(args.config)
    if cfg is None:
        return EXIT_FAILED

    return open_image(cfg=cfg, launcher=AppLauncher(open_bin=cfg.open_path), probe=FilesystemProbe())


if __name__ == "__main__":
    raise SystemExit(main())
