# vidgrab/core/config.py
from __future__ import annotations
import json
import logging
import math
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# ---- schema & defaults -------------------------------------------------------
SCHEMA_VERSION = 1
DEFAULT_CFG: Dict[str, Any] = {
    "schema": SCHEMA_VERSION,
    "check_updates": True,   # run `yt-dlp -U` at startup
    "max_attempts": 3,       # tool download attempts
    "retry_delay": 2.0,      # seconds between attempts
    "verbose": False,        # debug logging
}

HISTORY_LIMIT = 10
CONNECTIVITY_HOST = "github.com"

# ---- remote tools ------------------------------------------------------------
YTDLP_RELEASES = "https://github.com/yt-dlp/yt-dlp/releases/latest/download"
FFMPEG_RELEASES = "https://github.com/BtbN/FFmpeg-Builds/releases/download/latest"

@dataclass(frozen=True)
class ToolSource:
    downloader_url: str
    downloader_name: str
    media_url: Optional[str]          # None: no prebuilt bundle for this platform
    media_files: Tuple[str, ...]
    marker: str = "bin"

def tool_source(platform: str = sys.platform) -> ToolSource:
    if platform == "win32":
        return ToolSource(
            downloader_url=f"{YTDLP_RELEASES}/yt-dlp.exe",
            downloader_name="yt-dlp.exe",
            media_url=f"{FFMPEG_RELEASES}/ffmpeg-master-latest-win64-gpl.zip",
            media_files=("ffmpeg.exe", "ffprobe.exe", "ffplay.exe"),
        )
    if platform == "darwin":
        return ToolSource(
            downloader_url=f"{YTDLP_RELEASES}/yt-dlp_macos",
            downloader_name="yt-dlp",
            media_url=None,
            media_files=("ffmpeg", "ffprobe", "ffplay"),
        )
    return ToolSource(
        downloader_url=f"{YTDLP_RELEASES}/yt-dlp_linux",
        downloader_name="yt-dlp",
        media_url=f"{FFMPEG_RELEASES}/ffmpeg-master-latest-linux64-gpl.tar.xz",
        media_files=("ffmpeg", "ffprobe", "ffplay"),
    )

# ---- locations ---------------------------------------------------------------
# You can override the location with an env var:
#   VIDGRAB_HOME=<directory holding tools, config.json and history.json>
def _windows_roaming_dir() -> Path:
    return Path(os.environ.get("APPDATA", Path.home() / "AppData/Roaming"))

def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))

def app_home() -> Path:
    env_dir = os.environ.get("VIDGRAB_HOME")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    if os.name == "nt":
        return (_windows_roaming_dir() / "vidgrab").resolve()
    return (_xdg_data_home() / "vidgrab").resolve()

@dataclass(frozen=True)
class ToolLayout:
    """Where the tools live on disk and where they come from."""
    home: Path
    source: ToolSource

    @property
    def downloader(self) -> Path:
        return self.home / "bin" / self.source.downloader_name

    @property
    def media_dir(self) -> Path:
        return self.home / "ffmpeg"

    @property
    def media_bin(self) -> Path:
        return self.media_dir / "bin"

    @property
    def media_exe(self) -> Path:
        return self.media_bin / self.source.media_files[0]

    @property
    def work_dir(self) -> Path:
        return self.home

    @property
    def history_path(self) -> Path:
        return self.home / "history.json"

    @property
    def config_path(self) -> Path:
        return self.home / "config.json"

def default_layout(home: Optional[Path] = None) -> ToolLayout:
    return ToolLayout(home=(home or app_home()).expanduser().resolve(), source=tool_source())

# ---- load / save -------------------------------------------------------------
# key -> (type, minimum); bools are rejected where numbers are expected
LIMITS: Dict[str, Tuple[type, float]] = {
    "max_attempts": (int, 1),
    "retry_delay": (float, 0),
}

def _valid(key: str, value: Any) -> bool:
    if key in LIMITS:
        kind, minimum = LIMITS[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if kind is int and not isinstance(value, int):
            return False
        return math.isfinite(value) and value >= minimum
    return isinstance(value, type(DEFAULT_CFG[key]))

def _merge_defaults(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = DEFAULT_CFG.copy()
    for k, v in (cfg or {}).items():
        if k not in DEFAULT_CFG or k == "schema":
            continue
        if not _valid(k, v):
            logger.warning("Ignoring config value %s=%r, using %r", k, v, DEFAULT_CFG[k])
            continue
        out[k] = v
    out["schema"] = SCHEMA_VERSION
    return out

def load_cfg(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return DEFAULT_CFG.copy()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            return DEFAULT_CFG.copy()
        return _merge_defaults(raw)
    except (OSError, ValueError):
        # If the file is corrupt, keep a .bad copy and start fresh
        try:
            path.replace(path.with_suffix(".bad.json"))
        except OSError:
            pass
        return DEFAULT_CFG.copy()

def save_cfg(path: Path, cfg: Dict[str, Any]) -> None:
    write_json_atomic(path, _merge_defaults(cfg))

def write_json_atomic(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
