from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    hdiutil: str = "/usr/bin/hdiutil"
    open_bin: str = "/usr/bin/open"
    volumes_root: str = "/Volumes/"
    config_default: str = "~/.config/zen-decrypt/config.yaml"
    log_default: str = "~/Library/Logs/zen-decrypt.log"


PATHS = Paths()
