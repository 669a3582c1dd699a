# vidgrab/core/__init__.py
from .config import ToolLayout, default_layout, load_cfg, save_cfg, app_home
from .download import fetch
from .errors import SetupAborted, SetupError, VidgrabError
from .history import FolderHistory
from .installer import install_bundle
from .models import DownloadJob, MediaStatus, Mode, ProvisioningResult, ToolState, ToolStatus
from .options import build_command, compile_args
from .provision import Provisioner
from .utils import human_size, url_leaf_name

__all__ = [
    "ToolLayout", "default_layout", "load_cfg", "save_cfg", "app_home",
    "fetch", "install_bundle",
    "SetupAborted", "SetupError", "VidgrabError",
    "FolderHistory",
    "DownloadJob", "MediaStatus", "Mode", "ProvisioningResult", "ToolState", "ToolStatus",
    "build_command", "compile_args",
    "Provisioner",
    "human_size", "url_leaf_name",
    "setup_logging",
]

# ---- simple logging toggle for the package ----
import logging

def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s"
    )
    # quiet down noisy deps
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
