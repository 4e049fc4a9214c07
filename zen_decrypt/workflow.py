from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .lib.disk_images import (
    DiskImageService,
    find_mount_point,
    is_cancellation,
    parse_attach_mount_point,
)
from .lib.fsprobe import FilesystemProbe
from .lib.launcher import AppLauncher
from .workflow_config import WorkflowConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


@dataclass(frozen=True)
class MountQuery:
    is_mounted: bool
    mount_point: Optional[str] = None


@dataclass(frozen=True)
class AttachOutcome:
    status: str  # mounted|cancelled|failed
    mount_point: Optional[str] = None
    detail: str = ""


@dataclass(frozen=True)
class WorkflowResult:
    exit_code: int
    branch: Optional[str] = None  # secure|personal
    mount_point: Optional[str] = None


@dataclass(frozen=True)
class WorkflowCtx:
    cfg: WorkflowConfig
    disk_images: DiskImageService
    launcher: AppLauncher
    probe: FilesystemProbe = field(default_factory=FilesystemProbe)

    @classmethod
    def from_config(cls, cfg: WorkflowConfig) -> "WorkflowCtx":
        return cls(
            cfg=cfg,
            disk_images=DiskImageService(hdiutil=cfg.hdiutil_path),
            launcher=AppLauncher(open_bin=cfg.open_path),
        )


def volume_label(image_path: str) -> str:
    """Image file name without its extension; used in status lines only."""
    return os.path.splitext(os.path.basename(image_path))[0]


def validate_image(*, ctx: WorkflowCtx) -> Optional[str]:
    """Return the expanded image path, or None if the file is missing."""

    image_path = ctx.probe.expand_home(ctx.cfg.image_path)
    if not ctx.probe.exists(image_path):
        logger.error("Disk image not found at %s", image_path)
        return None
    return image_path


def query_mount(*, ctx: WorkflowCtx, image_path: str) -> MountQuery:
    mount_point = find_mount_point(ctx.disk_images.info(), image_path)
    return MountQuery(is_mounted=mount_point is not None, mount_point=mount_point)


def launch_credential_manager(*, ctx: WorkflowCtx) -> None:
    """Best effort: the credential manager only helps the user find the password."""

    app = ctx.cfg.credential_manager_path
    if not ctx.probe.exists(app):
        logger.warning("Credential manager not found at '%s'", app)
        return

    logger.info("Opening credential manager %s", app)
    status = ctx.launcher.open(app, wait=False)
    if status != 0:
        logger.warning("Failed to open credential manager (status %s); continuing", status)


def attach_image(*, ctx: WorkflowCtx, image_path: str) -> AttachOutcome:
    logger.info("Attempting to mount %s", image_path)
    logger.info("If the image is encrypted, macOS will now ask for the password.")

    r = ctx.disk_images.attach(image_path)
    logger.info("hdiutil attach finished with status %s", r.returncode)
    if r.stdout.strip():
        logger.info("hdiutil stdout:\n%s", r.stdout.strip())
    if r.stderr.strip():
        logger.info("hdiutil stderr:\n%s", r.stderr.strip())

    if r.ok:
        mount_point = query_mount(ctx=ctx, image_path=image_path).mount_point
        if mount_point is None:
            # Less reliable than hdiutil info, only used when info has nothing.
            mount_point = parse_attach_mount_point(r.stdout, ctx.cfg.volumes_root)
        if mount_point is None:
            return AttachOutcome(
                status="failed",
                detail="attach exited 0 but the mount point could not be determined",
            )
        return AttachOutcome(status="mounted", mount_point=mount_point)

    if is_cancellation(r.output, ctx.cfg.cancel_markers):
        return AttachOutcome(status="cancelled", detail="password prompt cancelled or authentication failed")
    return AttachOutcome(status="failed", detail=f"hdiutil attach exited with status {r.returncode}")


def _browser_installed(ctx: WorkflowCtx) -> bool:
    app = ctx.cfg.browser_path
    if ctx.probe.exists(app):
        return True
    logger.error("Browser application not found at '%s'", app)
    return False


def resolve_secure_profile(secure_profile: str, mount_point: str) -> str:
    """Absolute profile paths are used as-is, relative ones live under the mount point."""
    if os.path.isabs(secure_profile):
        return secure_profile
    return os.path.join(mount_point, secure_profile)


def _profile_args(profile: str) -> List[str]:
    return ["--profile", profile]


def eject(*, ctx: WorkflowCtx, mount_point: str) -> bool:
    logger.info("Ejecting %s", mount_point)
    r = ctx.disk_images.detach(mount_point)
    output = r.output.strip()
    if r.ok:
        logger.info("Ejected %s. %s", mount_point, output)
        return True
    logger.error("Failed to eject %s (status %s): %s", mount_point, r.returncode, output)
    return False


def run_secure_profile(*, ctx: WorkflowCtx, mount_point: str) -> int:
    if not _browser_installed(ctx):
        return EXIT_FAILED

    app = ctx.cfg.browser_path
    profile = resolve_secure_profile(ctx.cfg.secure_profile_path, mount_point)
    if ctx.probe.exists(profile):
        logger.info("Opening browser with secure profile %s; waiting for it to close", profile)
        args = _profile_args(profile)
    else:
        logger.warning("Secure profile not found at '%s'; opening browser with its default profile", profile)
        args = []

    exit_code = EXIT_FAILED
    try:
        status = ctx.launcher.open(app, args=args, wait=True)
        if status == 0:
            logger.info("Browser closed")
            exit_code = EXIT_OK
        else:
            logger.error("Browser exited with status %s", status)
    except Exception:
        logger.exception("Failed to run browser")
    finally:
        # Ejecting is best effort and never changes the exit code.
        eject(ctx=ctx, mount_point=mount_point)

    return exit_code


def run_personal_profile(*, ctx: WorkflowCtx) -> int:
    if not _browser_installed(ctx):
        return EXIT_FAILED

    app = ctx.cfg.browser_path
    profile = ctx.probe.expand_home(ctx.cfg.personal_profile_path)
    if ctx.probe.exists(profile):
        logger.info("Opening browser with personal profile %s", profile)
        args = _profile_args(profile)
    else:
        logger.warning("Personal profile not found at '%s'; opening browser with its default profile", profile)
        args = []

    status = ctx.launcher.open(app, args=args, wait=False)
    if status != 0:
        logger.warning("Failed to open browser (status %s)", status)
    return EXIT_OK


def run_workflow(*, ctx: WorkflowCtx) -> WorkflowResult:
    """Mount the profile image, run the browser on it and eject it.

    Falls back to the personal profile when the password prompt was
    cancelled. Every fatal condition ends the run with exit code 1.
    """

    image_path = validate_image(ctx=ctx)
    if image_path is None:
        return WorkflowResult(exit_code=EXIT_FAILED)

    label = volume_label(image_path)
    logger.info("Disk image: %s", image_path)
    logger.info("Expected volume name: %s", label)

    mount = query_mount(ctx=ctx, image_path=image_path)
    mount_point = mount.mount_point

    if mount.is_mounted:
        logger.info("%s is already mounted at %s; skipping credential manager", label, mount_point)
    else:
        launch_credential_manager(ctx=ctx)
        outcome = attach_image(ctx=ctx, image_path=image_path)
        if outcome.status == "failed":
            logger.error("Mounting %s failed: %s", label, outcome.detail)
            return WorkflowResult(exit_code=EXIT_FAILED)
        if outcome.status == "cancelled":
            logger.warning("Mounting %s failed: %s", label, outcome.detail)
        else:
            logger.info("%s mounted at %s", label, outcome.mount_point)
        mount_point = outcome.mount_point

    if mount_point is not None:
        return WorkflowResult(
            exit_code=run_secure_profile(ctx=ctx, mount_point=mount_point),
            branch="secure",
            mount_point=mount_point,
        )

    logger.info("Volume not mounted; using the personal profile")
    return WorkflowResult(exit_code=run_personal_profile(ctx=ctx), branch="personal")
