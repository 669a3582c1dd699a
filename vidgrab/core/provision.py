# vidgrab/core/provision.py
"""
Tool provisioning, run once at startup:

  1. connectivity precheck (DNS lookup; user may continue without it)
  2. downloader: fetch if missing (fatal on failure), else best-effort `-U`
  3. media tool: probe completeness, offer install/repair via the archive installer
  4. prepend the media tool's bin dir to PATH when advanced features are on
  5. functional probe for display

The outcome is an immutable ProvisioningResult handed to everything downstream.
"""
from __future__ import annotations
import functools
import logging
import os
import socket
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import CONNECTIVITY_HOST, ToolLayout
from .download import fetch
from .errors import SetupAborted, SetupError
from .installer import install_bundle, make_executable
from .models import MediaStatus, Prompter, ProvisioningResult, ToolState, ToolStatus
from .runner import probe_media_tool, self_update

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, Path], bool]


def check_connectivity(host: str = CONNECTIVITY_HOST) -> bool:
    """DNS resolution of a well-known host, as a proxy for 'internet works'."""
    try:
        socket.getaddrinfo(host, 443)
        return True
    except (socket.gaierror, OSError) as e:
        logger.debug("DNS lookup for %s failed: %s", host, e)
        return False


def probe_tool(bin_dir: Path, required: Iterable[str]) -> ToolState:
    names = list(required)
    missing = tuple(n for n in names if not (bin_dir / n).is_file())
    if not missing:
        return ToolState(ToolStatus.COMPLETE)
    if len(missing) == len(names):
        return ToolState(ToolStatus.ABSENT, missing)
    return ToolState(ToolStatus.INCOMPLETE, missing)


def prepend_path(directory: Path) -> None:
    """Put `directory` first on PATH for this process (and its children)."""
    d = str(directory)
    parts = os.environ.get("PATH", "").split(os.pathsep)
    if parts and parts[0] == d:
        return
    os.environ["PATH"] = os.pathsep.join([d] + [p for p in parts if p and p != d])


class Provisioner:
    def __init__(
        self,
        layout: ToolLayout,
        prompter: Prompter,
        fetcher: Optional[Fetcher] = None,
        check_updates: bool = True,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
    ):
        self.layout = layout
        self.prompter = prompter
        self.fetcher = fetcher or functools.partial(
            fetch, max_attempts=max_attempts, delay=retry_delay
        )
        self.check_updates = check_updates

    # ---- steps ---------------------------------------------------------------
    def ensure_connectivity(self) -> None:
        if check_connectivity():
            return
        logger.warning("No internet connection detected (or it is unstable)")
        if not self.prompter.confirm("Continue anyway?", default=True):
            raise SetupAborted("No internet connection")

    def ensure_downloader(self) -> Path:
        exe = self.layout.downloader
        if exe.is_file():
            if self.check_updates:
                logger.info("Checking for yt-dlp updates...")
                self_update(exe)
            return exe

        logger.info("Downloading yt-dlp...")
        exe.parent.mkdir(parents=True, exist_ok=True)
        if not self.fetcher(self.layout.source.downloader_url, exe):
            raise SetupError("Could not download yt-dlp. Check your connection.")
        make_executable(exe)
        logger.info("yt-dlp downloaded to %s", exe)
        return exe

    def media_state(self) -> ToolState:
        return probe_tool(self.layout.media_bin, self.layout.source.media_files)

    def install_media_tool(self) -> bool:
        src = self.layout.source
        if not src.media_url:
            logger.warning("No FFmpeg bundle is published for this platform; install it yourself")
            return False
        logger.info("Downloading FFmpeg...")
        return install_bundle(
            src.media_url,
            src.media_files,
            src.marker,
            self.layout.media_bin,
            self.layout.work_dir,
            fetcher=self.fetcher,
        )

    def ensure_media_tool(self) -> bool:
        """Returns whether advanced (FFmpeg-backed) features are enabled."""
        state = self.media_state()
        if state.status is ToolStatus.COMPLETE:
            logger.info("FFmpeg found and complete")
            return True

        if state.status is ToolStatus.INCOMPLETE:
            logger.warning("FFmpeg is incomplete - missing: %s", ", ".join(state.missing))
            if not self.prompter.confirm("Repair the FFmpeg installation?", default=True):
                logger.warning("Continuing without FFmpeg - some features are limited")
                return False
            ok = self.install_media_tool()
            if not ok:
                logger.warning("FFmpeg could not be repaired, but you can continue")
            return ok

        if not self.prompter.confirm("Download FFmpeg for extra features (recommended)?", default=True):
            logger.warning("Continuing without FFmpeg - some features are limited")
            return False
        ok = self.install_media_tool()
        if not ok:
            logger.warning("FFmpeg could not be installed, but you can continue")
        return ok

    def media_status(self, enabled: bool) -> MediaStatus:
        if not enabled:
            return MediaStatus.NOT_AVAILABLE
        if probe_media_tool(self.layout.media_exe):
            return MediaStatus.FUNCTIONAL
        return MediaStatus.NONFUNCTIONAL

    # ---- orchestration -------------------------------------------------------
    def run(self) -> ProvisioningResult:
        self.ensure_connectivity()
        downloader = self.ensure_downloader()
        enabled = self.ensure_media_tool()
        if enabled:
            prepend_path(self.layout.media_bin)
            logger.info("FFmpeg added to PATH for this session")
        return ProvisioningResult(
            advanced_enabled=enabled,
            tool_bin_dir=self.layout.media_bin,
            downloader=downloader,
            media_status=self.media_status(enabled),
        )
