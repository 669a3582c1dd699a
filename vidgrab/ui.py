#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
UI layer for vidgrab

- Startup: tool provisioning with live download progress
- Session loop: URL → mode → folder → summary → yt-dlp run → result → again?
- Folder history menu (persisted, most recent first)
"""

from __future__ import annotations
import functools
import shlex
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn, DownloadColumn, Progress, TextColumn, TimeRemainingColumn, TransferSpeedColumn
)

from .core import (
    DownloadJob,
    FolderHistory,
    MediaStatus,
    Mode,
    ProvisioningResult,
    Provisioner,
    ToolLayout,
    build_command,
    fetch,
    human_size,
)
from .core.history import normalize_folder
from .core.models import Prompter
from .core.runner import predict_filename, run_downloader
from .core.urls import UrlKind, classify_url, find_existing_download
from .tui import section

console = Console()

NEW_PATH = "__new__"
CURRENT_DIR = "__current__"

# ────────────────────────── Startup ──────────────────────────
def fetch_with_progress(url: str, out_path: Path, max_attempts: int = 3, delay: float = 2.0) -> bool:
    with Progress(
        TextColumn(f"[bold]Downloading[/] {out_path.name}", justify="left"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=True
    ) as progress:
        task_id = progress.add_task("dl", total=None)

        def on_progress(done: int, total: int) -> None:
            progress.update(task_id, completed=done, total=total or None)

        ok = fetch(url, out_path, max_attempts=max_attempts, delay=delay, on_progress=on_progress)
    if ok:
        console.print(f"[green]✓[/] {out_path.name} [dim]({human_size(out_path.stat().st_size)})[/]")
    return ok

def provision_tools(layout: ToolLayout, prompter: Prompter, cfg: dict, check_updates: bool = True) -> ProvisioningResult:
    section(console, "Initializing vidgrab", f"Tools folder: {layout.home}")
    fetcher = functools.partial(
        fetch_with_progress,
        max_attempts=int(cfg.get("max_attempts", 3)),
        delay=float(cfg.get("retry_delay", 2.0)),
    )
    prov = Provisioner(
        layout,
        prompter,
        fetcher=fetcher,
        check_updates=check_updates and bool(cfg.get("check_updates", True)),
    )
    return prov.run()

def media_label(status: MediaStatus) -> str:
    if status is MediaStatus.FUNCTIONAL:
        return "[green]✓ Functional[/]"
    if status is MediaStatus.NONFUNCTIONAL:
        return "[yellow]⚠ Partial[/]"
    return "[red]✗ Not available[/]"

# ────────────────────────── Session loop ──────────────────────────
class SessionState(Enum):
    COLLECT_URL = "collect_url"
    COLLECT_MODE = "collect_mode"
    COLLECT_FOLDER = "collect_folder"
    CONFIRM = "confirm"
    RUN = "run"
    REPORT = "report"
    ASK_REPEAT = "ask_repeat"
    EXIT = "exit"

class Session:
    """One interactive session: any number of sequential download jobs."""

    def __init__(
        self,
        result: ProvisioningResult,
        prompter: Prompter,
        history: FolderHistory,
        console_: Optional[Console] = None,
        runner: Callable[[Path, Sequence[str], Path], int] = run_downloader,
        predictor: Optional[Callable[[str], Optional[str]]] = None,
    ):
        self.result = result
        self.prompter = prompter
        self.history = history
        self.console = console_ or console
        self.runner = runner
        self.predictor = predictor or functools.partial(predict_filename, result.downloader)

        self.state = SessionState.COLLECT_URL
        self.show_header = True
        self.url = ""
        self.mode: Optional[Mode] = None
        self.custom_format = ""
        self.custom_embed = False
        self.job: Optional[DownloadJob] = None
        self.exit_code: Optional[int] = None
        self.spawn_error: Optional[OSError] = None
        self.jobs_run = 0

        self._handlers = {
            SessionState.COLLECT_URL: self.collect_url,
            SessionState.COLLECT_MODE: self.collect_mode,
            SessionState.COLLECT_FOLDER: self.collect_folder,
            SessionState.CONFIRM: self.confirm,
            SessionState.RUN: self.run_job,
            SessionState.REPORT: self.report,
            SessionState.ASK_REPEAT: self.ask_repeat,
        }

    def run(self) -> int:
        while self.state is not SessionState.EXIT:
            self.state = self._handlers[self.state]()
        self.console.print()
        self.console.print("[bold cyan]Thanks for using vidgrab![/]")
        return 0

    def restart(self) -> SessionState:
        self.show_header = True
        return SessionState.COLLECT_URL

    # ---- states --------------------------------------------------------------
    def render_header(self) -> None:
        section(self.console, "vidgrab: video downloader")
        ok = self.result.downloader.is_file()
        self.console.print(f"  • yt-dlp: {'[green]✓[/]' if ok else '[red]✗[/]'}")
        self.console.print(f"  • FFmpeg: {media_label(self.result.media_status)}")
        self.console.print()

    def collect_url(self) -> SessionState:
        if self.show_header:
            self.render_header()
            self.show_header = False

        url = self.prompter.ask("Enter the video/playlist URL")
        kind = classify_url(url)
        if kind is UrlKind.KNOWN:
            self.url = url.strip()
            return SessionState.COLLECT_MODE
        if kind is UrlKind.GENERIC:
            self.console.print("[yellow]WARNING: this URL is not from a known site[/]")
            if self.prompter.confirm("Continue anyway?", default=True):
                self.url = url.strip()
                return SessionState.COLLECT_MODE
        self.console.print("[red]Invalid or unrecognized URL[/]")
        return SessionState.COLLECT_URL

    def collect_mode(self) -> SessionState:
        items = [(f"{i}. {m.label}", m) for i, m in enumerate(Mode, 1)]
        mode = self.prompter.choose("=== DOWNLOAD OPTIONS ===", items)
        if mode is None:
            return self.restart()

        self.mode = mode
        self.custom_format = ""
        self.custom_embed = False
        if mode is Mode.CUSTOM:
            self.custom_format = self.prompter.ask("Custom format (e.g. bestvideo+bestaudio)")
            if self.result.advanced_enabled:
                self.custom_embed = self.prompter.confirm("Embed metadata and thumbnails?", default=True)
        return SessionState.COLLECT_FOLDER

    def collect_folder(self) -> SessionState:
        self.history.reload()
        items = [(p, p) for p in self.history]
        items += [
            ("[bold green]Enter a new path[/]", NEW_PATH),
            (f"Use current folder [dim]({Path.cwd()})[/]", CURRENT_DIR),
        ]
        choice = self.prompter.choose("Select a download folder", items)
        if choice is None:
            return self.restart()

        record = True
        if choice == NEW_PATH:
            raw = ""
            while not raw:
                raw = self.prompter.ask("New download path").strip()
                if not raw:
                    self.console.print("[yellow]The path cannot be empty.[/]")
            folder = normalize_folder(raw)
            record = raw != "."
        elif choice == CURRENT_DIR:
            folder = Path.cwd()
            record = False
        else:
            folder = Path(choice)

        if not folder.is_dir():
            self.console.print("[yellow]The folder does not exist. Creating it...[/]")
            try:
                folder.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.console.print(f"[red]ERROR: could not create the folder:[/] {e}")
                return self.restart()
            self.console.print("[green]Folder created[/]")

        if record:
            self.history.remember(str(folder))

        self.job = DownloadJob(
            url=self.url,
            mode=self.mode,
            folder=folder,
            custom_format=self.custom_format,
            custom_embed=self.custom_embed,
        )
        return SessionState.CONFIRM

    def confirm(self) -> SessionState:
        job = self.job
        details = (
            f"[bold cyan]URL:[/] {job.url}\n"
            f"[bold cyan]Mode:[/] {job.mode.label}"
        )
        if job.mode is Mode.CUSTOM:
            details += f" [dim]({job.custom_format or 'yt-dlp default'})[/]"
        details += (
            f"\n[bold cyan]Folder:[/] {job.folder}\n"
            f"[bold cyan]FFmpeg:[/] {media_label(self.result.media_status)}"
        )
        self.console.print()
        self.console.print(Panel(details, title="=== SUMMARY ===", border_style="green", expand=False))

        if self.prompter.confirm("Start the download?", default=True):
            return SessionState.RUN
        self.console.print("[yellow]Download cancelled.[/]")
        return SessionState.ASK_REPEAT

    def run_job(self) -> SessionState:
        job = self.job
        self.exit_code = None
        self.spawn_error = None

        existing = find_existing_download(job.folder, job.url, job.mode, predict=self.predictor)
        if existing is not None:
            if not self.prompter.confirm(f'"{existing.name}" already exists. Overwrite it?', default=False):
                self.console.print("[yellow]Download cancelled (file already exists).[/]")
                return self.restart()
            job.extra_args.append("--force-overwrites")

        args = build_command(job, self.result)
        self.console.print(f"[dim]Command: {shlex.join([str(self.result.downloader), *args])}[/]")
        self.console.print()
        try:
            self.exit_code = self.runner(self.result.downloader, args, job.folder)
        except OSError as e:
            self.spawn_error = e
        self.jobs_run += 1
        return SessionState.REPORT

    def report(self) -> SessionState:
        self.console.print()
        if self.spawn_error is not None:
            self.console.print(f"[bold red]ERROR running yt-dlp:[/] {self.spawn_error}")
        elif self.exit_code == 0:
            self.console.print("[bold green]>>> DOWNLOAD COMPLETED SUCCESSFULLY! <<<[/]")
            self.console.print(f"[green]Files saved in:[/] {self.job.folder}")
        else:
            self.console.print(f"[bold red]Download FAILED.[/] Exit code: {self.exit_code}")
        return SessionState.ASK_REPEAT

    def ask_repeat(self) -> SessionState:
        self.console.print()
        if self.prompter.confirm("Download something else?", default=True):
            return self.restart()
        return SessionState.EXIT
