from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

from zen_decrypt.lib.command import CmdResult
from zen_decrypt.lib.disk_images import DiskImage, SystemEntity
from zen_decrypt.lib.fsprobe import FilesystemProbe
from zen_decrypt.workflow import WorkflowCtx
from zen_decrypt.workflow_config import WorkflowConfig


def mounted_image(image_path: str, mount_point: str) -> DiskImage:
    return DiskImage(
        image_path=image_path,
        entities=(
            SystemEntity(content_hint="GUID_partition_scheme"),
            SystemEntity(content_hint="Apple_HFS", mount_point=mount_point, volume_kind="hfs"),
        ),
    )


class FakeDiskImages:
    """Stands in for DiskImageService; records every call."""

    def __init__(
        self,
        *,
        info_results: Optional[List[List[DiskImage]]] = None,
        attach_result: Optional[CmdResult] = None,
        detach_result: Optional[CmdResult] = None,
    ) -> None:
        self.info_results = list(info_results or [[]])
        self.attach_result = attach_result or CmdResult(argv=["hdiutil"], returncode=0, stdout="", stderr="")
        self.detach_result = detach_result or CmdResult(argv=["hdiutil"], returncode=0, stdout="", stderr="")
        self.info_calls = 0
        self.attach_calls: List[str] = []
        self.detach_calls: List[str] = []

    def info(self) -> List[DiskImage]:
        idx = min(self.info_calls, len(self.info_results) - 1)
        self.info_calls += 1
        return self.info_results[idx]

    def attach(self, image_path: str) -> CmdResult:
        self.attach_calls.append(image_path)
        return self.attach_result

    def detach(self, mount_point: str) -> CmdResult:
        self.detach_calls.append(mount_point)
        return self.detach_result


class FakeLauncher:
    """Stands in for AppLauncher; statuses are looked up by target."""

    def __init__(self, statuses: Optional[Dict[str, int]] = None, raises: Optional[Exception] = None) -> None:
        self.statuses = statuses or {}
        self.raises = raises
        self.calls: List[Dict[str, Any]] = []

    def open(self, target: str, *, args: Sequence[str] = (), wait: bool = False) -> int:
        self.calls.append({"target": target, "args": list(args), "wait": wait})
        if self.raises is not None:
            raise self.raises
        return self.statuses.get(target, 0)


class Layout:
    """Real files under tmp_path for the configured paths."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.home = root / "home"
        self.image = self.home / "Movies" / "Profile.dmg"
        self.browser = root / "Applications" / "Zen.app"
        self.credential_manager = root / "Applications" / "Proton Pass.app"
        self.volume = root / "Volumes" / "Profile"
        self.secure_profile = root / "Volumes" / "Profile Secure" / "abc.Secure"
        self.personal_profile = self.home / "Library" / "Application Support" / "zen" / "Profiles" / "xyz.Personal"

    def raw_config(self) -> Dict[str, Any]:
        return {
            "paths": {
                "image": "~/Movies/Profile.dmg",
                "credential_manager": str(self.credential_manager),
                "browser": str(self.browser),
                "secure_profile": str(self.secure_profile),
                "personal_profile": "~/Library/Application Support/zen/Profiles/xyz.Personal",
            },
            "disk_image": {"volumes_root": str(self.root / "Volumes") + "/"},
        }


@pytest.fixture
def layout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Layout:
    lay = Layout(tmp_path)
    monkeypatch.setenv("HOME", str(lay.home))
    lay.image.parent.mkdir(parents=True)
    lay.image.write_bytes(b"encrypted")
    lay.browser.mkdir(parents=True)
    lay.credential_manager.mkdir(parents=True)
    return lay


def make_ctx(layout: Layout, disk_images: FakeDiskImages, launcher: FakeLauncher) -> WorkflowCtx:
    return WorkflowCtx(
        cfg=WorkflowConfig(raw=layout.raw_config()),
        disk_images=disk_images,  # type: ignore[arg-type]
        launcher=launcher,  # type: ignore[arg-type]
        probe=FilesystemProbe(),
    )


@pytest.fixture
def reset_root_logging():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    for attr in ("_zen_decrypt_configured", "_zen_decrypt_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
    root.setLevel(level)
