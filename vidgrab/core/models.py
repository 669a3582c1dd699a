# vidgrab/core/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence, Tuple


class ToolStatus(Enum):
    ABSENT = "absent"
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ToolState:
    status: ToolStatus
    missing: Tuple[str, ...] = ()


class MediaStatus(Enum):
    NOT_AVAILABLE = "not available"
    NONFUNCTIONAL = "installed, not working"
    FUNCTIONAL = "functional"


@dataclass(frozen=True)
class ProvisioningResult:
    advanced_enabled: bool
    tool_bin_dir: Path
    downloader: Path
    media_status: MediaStatus = MediaStatus.NOT_AVAILABLE


class Mode(Enum):
    BEST_720 = "best720"
    AUDIO = "audio"
    UP_TO_1080 = "1080"
    UP_TO_720 = "720"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return MODE_LABELS[self]


MODE_LABELS = {
    Mode.BEST_720: "Video (automatic quality, recommended)",
    Mode.AUDIO: "Audio only (MP3)",
    Mode.UP_TO_1080: "Video 1080p (if available)",
    Mode.UP_TO_720: "Video 720p",
    Mode.CUSTOM: "Custom format (advanced)",
}


@dataclass
class DownloadJob:
    url: str
    mode: Mode
    folder: Path
    custom_format: str = ""
    custom_embed: bool = False
    extra_args: List[str] = field(default_factory=list)


class Prompter(Protocol):
    """Presents a typed question and returns a typed answer."""

    def ask(self, question: str, default: str = "") -> str: ...

    def confirm(self, question: str, default: bool = True) -> bool: ...

    def choose(self, title: str, items: Sequence[Tuple[str, Any]]) -> Optional[Any]: ...
