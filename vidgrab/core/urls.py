# vidgrab/core/urls.py
from __future__ import annotations
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .models import Mode

logger = logging.getLogger(__name__)

# ────────────────────────── URL shape ──────────────────────────
KNOWN_SITES = [
    re.compile(r"(^|[/.])(youtube\.com|youtu\.be)([/:?#]|$)", re.I),
    re.compile(r"(^|[/.])vimeo\.com([/:?#]|$)", re.I),
    re.compile(r"(^|[/.])(twitter\.com|x\.com)([/:?#]|$)", re.I),
    re.compile(r"(^|[/.])tiktok\.com([/:?#]|$)", re.I),
    re.compile(r"(^|[/.])(instagram\.com|instagr\.am)([/:?#]|$)", re.I),
    re.compile(r"(^|[/.])facebook\.com([/:?#]|$)", re.I),
    re.compile(r"(^|[/.])twitch\.tv([/:?#]|$)", re.I),
]
HTTP_URL = re.compile(r"^https?://[^\s/?#]+\S*$", re.I)


class UrlKind(Enum):
    EMPTY = "empty"
    KNOWN = "known"        # one of the video/social sites above
    GENERIC = "generic"    # some other http(s) URL; needs confirmation
    INVALID = "invalid"


def classify_url(url: str) -> UrlKind:
    u = (url or "").strip()
    if not u:
        return UrlKind.EMPTY
    if any(p.search(u) for p in KNOWN_SITES):
        return UrlKind.KNOWN
    if HTTP_URL.match(u):
        return UrlKind.GENERIC
    return UrlKind.INVALID

# ────────────────────────── Existing downloads ──────────────────────────
VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/shorts/)([^&\n?#/]+)"),
    re.compile(r"vimeo\.com/(\d+)"),
    re.compile(r"tiktok\.com/.*/video/(\d+)"),
    re.compile(r"(?:instagram\.com/(?:p|reel)/|instagr\.am/p/)([A-Za-z0-9_-]+)"),
]

AUDIO_EXTS = (".mp3",)
VIDEO_EXTS = (".mp4", ".mkv", ".webm", ".mov", ".avi", ".flv", ".m4a")


def extract_video_id(url: str) -> Optional[str]:
    for pattern in VIDEO_ID_PATTERNS:
        m = pattern.search(url or "")
        if m:
            return m.group(1)
    return None


def _url_token(url: str) -> str:
    return re.sub(r"https?://|www\.|\.com|\.net|\.org", "", url.lower())


def find_existing_download(
    folder: Path,
    url: str,
    mode: Mode,
    predict: Optional[Callable[[str], Optional[str]]] = None,
) -> Optional[Path]:
    """
    Best-effort guess whether `url` was already downloaded into `folder`.
    Matches on the site video id, else on the file name yt-dlp would write
    (`predict(url)`). Any failure means "nothing found".
    """
    try:
        key = extract_video_id(url)
        if not key and predict is not None:
            predicted = predict(url)
            if predicted:
                # compare on the title part; the container may change after merging
                key = Path(predicted).stem
        if not key:
            return None

        exts = AUDIO_EXTS if mode is Mode.AUDIO else VIDEO_EXTS
        key = key.lower()
        token = _url_token(url)
        for entry in sorted(folder.iterdir()):
            if not entry.is_file() or entry.suffix.lower() not in exts:
                continue
            name = entry.name.lower()
            if key in name or token in name:
                return entry
    except OSError as e:
        logger.debug("Existing-file check skipped: %s", e)
    return None
