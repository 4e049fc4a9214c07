from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .lib.env import PATHS

DEFAULT_CANCEL_MARKERS = (
    "Authentication_Canceled",
    "authentication error",
    "cancelled",
    "attach canceled",
)


@dataclass(frozen=True)
class WorkflowConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def image_path(self) -> str:
        return str(self._section("paths").get("image") or "~/Movies/Profile.dmg")

    @property
    def credential_manager_path(self) -> str:
        return str(self._section("paths").get("credential_manager") or "/Applications/Proton Pass.app")

    @property
    def browser_path(self) -> str:
        return str(self._section("paths").get("browser") or "/Applications/Zen.app")

    @property
    def secure_profile_path(self) -> str:
        return str(self._section("paths").get("secure_profile") or "/Volumes/Profile Secure/j3wki3fc.Secure")

    @property
    def personal_profile_path(self) -> str:
        return str(
            self._section("paths").get("personal_profile")
            or "~/Library/Application Support/zen/Profiles/zi76byi5.Pesonal"
        )

    @property
    def hdiutil_path(self) -> str:
        return str(self._section("disk_image").get("hdiutil") or PATHS.hdiutil)

    @property
    def volumes_root(self) -> str:
        return str(self._section("disk_image").get("volumes_root") or PATHS.volumes_root)

    @property
    def cancel_markers(self) -> List[str]:
        markers = self._section("disk_image").get("cancel_markers")
        if markers is None:
            return list(DEFAULT_CANCEL_MARKERS)
        return [str(m) for m in markers]

    @property
    def open_path(self) -> str:
        return str(self._section("launcher").get("open") or PATHS.open_bin)


def _validate(raw: Dict[str, Any]) -> None:
    for name in ("paths", "disk_image", "launcher"):
        section = raw.get(name)
        if section is not None and not isinstance(section, dict):
            raise ValueError(f"config section '{name}' must be a mapping")

    markers = (raw.get("disk_image") or {}).get("cancel_markers")
    if markers is not None and not isinstance(markers, list):
        raise ValueError("disk_image.cancel_markers must be a list")


def load_workflow_config(path: str) -> WorkflowConfig:
    p = Path(path).expanduser()
    if not p.exists():
        raise FileNotFoundError(str(p))

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("workflow config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the workflow config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML in {p}: {e}") from e

    if not isinstance(raw, dict):
        raise ValueError("workflow config must contain a mapping/object")

    _validate(raw)
    return WorkflowConfig(raw=raw)
