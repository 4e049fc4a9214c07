from __future__ import annotations

import logging
import os
import plistlib
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from xml.parsers.expat import ExpatError

from .command import CmdResult, run_cmd
from .env import PATHS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemEntity:
    mount_point: Optional[str] = None
    content_hint: Optional[str] = None
    volume_kind: Optional[str] = None


@dataclass(frozen=True)
class DiskImage:
    image_path: str
    entities: Tuple[SystemEntity, ...] = ()


def _entity_from_plist(raw: Dict[str, Any]) -> SystemEntity:
    return SystemEntity(
        mount_point=raw.get("mount-point"),
        content_hint=raw.get("content-hint"),
        volume_kind=raw.get("volume-kind"),
    )


def parse_info_plist(text: str) -> List[DiskImage]:
    """Parse `hdiutil info -plist` output.

    Raises ValueError if the text is not a plist with an `images` list.
    Images without an `image-path` are skipped.
    """

    try:
        data = plistlib.loads(text.encode("utf-8"))
    except ExpatError as e:
        raise ValueError(f"hdiutil info output is not a plist: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("hdiutil info plist must be a dictionary")

    images: List[DiskImage] = []
    for raw in data.get("images") or []:
        if not isinstance(raw, dict) or not raw.get("image-path"):
            continue
        entities = tuple(
            _entity_from_plist(e) for e in (raw.get("system-entities") or []) if isinstance(e, dict)
        )
        images.append(DiskImage(image_path=str(raw["image-path"]), entities=entities))
    return images


def _same_image(a: str, b: str) -> bool:
    return a == b or os.path.realpath(a) == os.path.realpath(b)


def find_mount_point(images: Iterable[DiskImage], image_path: str) -> Optional[str]:
    """First mount point of the image whose path matches image_path."""

    for image in images:
        if not _same_image(image.image_path, image_path):
            continue
        for entity in image.entities:
            if entity.mount_point:
                return entity.mount_point
    return None


def parse_attach_mount_point(stdout: str, volumes_root: str = PATHS.volumes_root) -> Optional[str]:
    """Fallback: pull the mount point out of `hdiutil attach` output.

    Expected lines look like `/dev/disk4s1<TAB>Apple_HFS<TAB>/Volumes/Profile`;
    the mount point is the last of at least three tab-separated fields.
    """

    for line in stdout.splitlines():
        parts = [p.strip() for p in line.split("\t") if p.strip()]
        if len(parts) >= 3 and parts[-1].startswith(volumes_root):
            return parts[-1]
    return None


def is_cancellation(text: str, markers: Sequence[str]) -> bool:
    """True if text contains any marker (case-sensitive)."""

    return any(m in text for m in markers)


class DiskImageService:
    """Thin adapter over `hdiutil`."""

    def __init__(self, hdiutil: str = PATHS.hdiutil) -> None:
        self.hdiutil = hdiutil

    def info(self) -> List[DiskImage]:
        r = run_cmd([self.hdiutil, "info", "-plist"])
        if not r.ok:
            logger.warning("hdiutil info failed (%s): %s", r.returncode, r.stderr.strip())
            return []
        try:
            return parse_info_plist(r.stdout)
        except ValueError as e:
            logger.warning("Unable to read hdiutil info: %s", e)
            return []

    def attach(self, image_path: str) -> CmdResult:
        # -nobrowse keeps Finder from opening a window for the volume.
        return run_cmd([self.hdiutil, "attach", image_path, "-nobrowse"])

    def detach(self, mount_point: str) -> CmdResult:
        return run_cmd([self.hdiutil, "detach", mount_point])
