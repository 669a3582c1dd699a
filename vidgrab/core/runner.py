# vidgrab/core/runner.py
"""Subprocess seams around the external tools (yt-dlp, ffmpeg)."""
from __future__ import annotations
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

UPDATE_FLAG = "-U"
VERSION_FLAG = "-version"

def run_downloader(downloader: Path, args: Sequence[str], cwd: Path) -> int:
    """
    Run the downloader in the foreground with the terminal inherited.
    Returns the exit code; OSError (e.g. executable missing) propagates.
    """
    cmd = [str(downloader), *args]
    logger.debug("Running %s (cwd=%s)", cmd, cwd)
    proc = subprocess.run(cmd, cwd=str(cwd))
    return proc.returncode

def self_update(downloader: Path) -> bool:
    """`yt-dlp -U`; any failure only means we could not check for updates."""
    try:
        proc = subprocess.run(
            [str(downloader), UPDATE_FLAG],
            capture_output=True, text=True,
        )
    except OSError as e:
        logger.warning("Could not check for updates: %s", e)
        return False
    if proc.returncode != 0:
        detail = (proc.stderr or proc.stdout or "").strip().splitlines()
        logger.warning(
            "Could not check for updates (exit code %d)%s",
            proc.returncode, f": {detail[-1]}" if detail else "",
        )
        return False
    out = (proc.stdout or "").strip().splitlines()
    logger.info("%s", out[-1] if out else "yt-dlp is up to date")
    return True

def probe_media_tool(exe: Path) -> bool:
    """`ffmpeg -version` exits zero."""
    try:
        proc = subprocess.run([str(exe), VERSION_FLAG], capture_output=True)
    except OSError as e:
        logger.debug("Media tool probe failed: %s", e)
        return False
    return proc.returncode == 0

def predict_filename(downloader: Path, url: str, template: str = "%(title)s.%(ext)s") -> Optional[str]:
    """Ask yt-dlp which file name it would write for `url`; None on any failure."""
    cmd: List[str] = [str(downloader), "--get-filename", "-o", template, "--", url]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        logger.debug("Filename query failed: %s", e)
        return None
    if proc.returncode != 0:
        return None
    lines = [ln.strip() for ln in (proc.stdout or "").splitlines() if ln.strip()]
    return lines[0] if lines else None
