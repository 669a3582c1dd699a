# vidgrab/core/options.py
"""
Option compiler: maps a download mode plus the provisioning result to the
yt-dlp argument vector. The URL is appended by `build_command`.
"""
from __future__ import annotations
from typing import Dict, List, Sequence

from .models import DownloadJob, Mode, ProvisioningResult

BASE_FLAGS = ("--console-title", "--no-part")
EMBED_METADATA = "--embed-metadata"
EMBED_THUMBNAIL = "--embed-thumbnail"

FORMAT_FLAGS: Dict[Mode, Sequence[str]] = {
    Mode.BEST_720:   ("-f", "best[height<=720]/best"),
    Mode.AUDIO:      ("-x", "--audio-format", "mp3", "--audio-quality", "0"),
    Mode.UP_TO_1080: ("-f", "bestvideo[height<=1080]+bestaudio/best[height<=1080]"),
    Mode.UP_TO_720:  ("-f", "bestvideo[height<=720]+bestaudio/best[height<=720]"),
}

# thumbnails cannot be embedded into the extracted mp3
EMBED_FLAGS: Dict[Mode, Sequence[str]] = {
    Mode.BEST_720:   (EMBED_METADATA, EMBED_THUMBNAIL),
    Mode.AUDIO:      (EMBED_METADATA,),
    Mode.UP_TO_1080: (EMBED_METADATA, EMBED_THUMBNAIL),
    Mode.UP_TO_720:  (EMBED_METADATA, EMBED_THUMBNAIL),
    Mode.CUSTOM:     (EMBED_METADATA, EMBED_THUMBNAIL),
}


def compile_args(
    mode: Mode,
    result: ProvisioningResult,
    custom_format: str = "",
    custom_embed: bool = False,
) -> List[str]:
    args = list(BASE_FLAGS)
    if result.advanced_enabled:
        args += ["--ffmpeg-location", str(result.tool_bin_dir)]

    if mode is Mode.CUSTOM:
        expr = (custom_format or "").strip()
        if expr:
            args += ["-f", expr]
        embed = result.advanced_enabled and custom_embed
    else:
        args += FORMAT_FLAGS[mode]
        embed = result.advanced_enabled

    if embed:
        args += EMBED_FLAGS[mode]
    return args


def build_command(job: DownloadJob, result: ProvisioningResult) -> List[str]:
    """Full argument vector for one job (without the executable)."""
    args = compile_args(job.mode, result, job.custom_format, job.custom_embed)
    args += job.extra_args
    args.append(job.url)
    return args
