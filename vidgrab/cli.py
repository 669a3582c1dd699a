# vidgrab/cli.py
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .core import (
    FolderHistory, SetupAborted, SetupError, default_layout, load_cfg, save_cfg, setup_logging
)
from .tui import RichPrompter
from .ui import Session, console, provision_tools

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="vidgrab: interactive yt-dlp + FFmpeg launcher")
    ap.add_argument("--home", type=Path, help="Folder for tools, config and history (default: per-user data dir)")
    ap.add_argument("--no-update", action="store_true", help="Skip the yt-dlp self-update check")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap.parse_args(argv)

def run(argv=None) -> int:
    args = parse_args(argv)
    layout = default_layout(args.home)
    cfg = load_cfg(layout.config_path)
    setup_logging(verbose=args.verbose or bool(cfg.get("verbose", False)))
    if not layout.config_path.exists():
        try:
            save_cfg(layout.config_path, cfg)
        except OSError as e:
            logger.debug("Could not write default config: %s", e)

    prompter = RichPrompter(console)
    try:
        result = provision_tools(layout, prompter, cfg, check_updates=not args.no_update)
    except (SetupError, SetupAborted) as e:
        console.print(f"[bold red]ERROR:[/] {e}")
        return 1

    history = FolderHistory(layout.history_path)
    return Session(result, prompter, history).run()

def main():
    try:
        code = run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/]")
        code = 130
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        console.print(f"[bold red]Unexpected error:[/] {e}")
        code = 1
    sys.exit(code)

if __name__ == "__main__":
    main()
