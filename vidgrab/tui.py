#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Terminal widgets for vidgrab: the banner panel, a selection menu and the
rich-backed Prompter used by the provisioner and the session loop.
"""
from __future__ import annotations
import platform
from typing import Any, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

try:
    import msvcrt
except ImportError:
    msvcrt = None

BANNER = r"""
       _     _                 _
__   _(_) __| | __ _ _ __ __ _| |__
\ \ / / |/ _` |/ _` | '__/ _` | '_ \
 \ V /| | (_| | (_| | | | (_| | |_) |
  \_/ |_|\__,_|\__, |_|  \__,_|_.__/
               |___/
""".rstrip()

OS_NAMES = {"Darwin": "macOS"}

# msvcrt.getch() codes
ARROW_PREFIXES = (b"\x00", b"\xe0")
KEY_UP, KEY_DOWN, KEY_ENTER = b"H", b"P", b"\r"
CANCEL_KEYS = (b"\x1b", b"0", b"q")


def banner(title: str, subtitle: str = "") -> Panel:
    os_name = platform.system()
    menu_kind = "arrow-key menus" if msvcrt else "numbered menus"
    msg = (
        f"[bold cyan]{BANNER}[/]\n"
        f"[dim]{OS_NAMES.get(os_name, os_name)} {platform.release()} · {menu_kind}[/]\n\n"
        f"[bold]{title}[/]"
    )
    if subtitle:
        msg += f"\n[dim]{subtitle}[/]"
    return Panel.fit(msg, border_style="cyan")


def section(console: Console, title: str, subtitle: str = "") -> None:
    console.clear()
    console.print(banner(title, subtitle))


class Menu:
    """Pick one of `items` ((label, value) pairs). None means cancelled."""

    def __init__(self, console_: Console, items: List[Tuple[str, Any]], title: str = ""):
        self.console = console_
        self.items = items
        self.title = title
        self.idx = 0

    def show(self) -> Any:
        if msvcrt is None:
            return self._numbered()
        return self._arrows()

    def _numbered(self) -> Any:
        self.console.print(f"[bold]{self.title}[/]")
        for i, (label, _) in enumerate(self.items, 1):
            self.console.print(f"[{i}] {label}")
        count = len(self.items)
        while True:
            ans = Prompt.ask("Select (0 to cancel)", default="1", console=self.console).strip()
            if ans == "0":
                return None
            if ans.isdigit() and 1 <= int(ans) <= count:
                return self.items[int(ans) - 1][1]
            self.console.print(f"[yellow]Enter a number between 1 and {count}.[/]")

    def _render(self) -> None:
        section(self.console, self.title)
        for i, (label, _) in enumerate(self.items):
            if i == self.idx:
                self.console.print(f"[reverse bold cyan]➤ {label}[/]")
            else:
                self.console.print(f"  {label}")
        self.console.print("\n[dim]↑/↓ to move, Enter to select, Esc to go back.[/]")

    def _arrows(self) -> Any:
        last = len(self.items) - 1
        while True:
            self._render()
            key = msvcrt.getch()
            if key in ARROW_PREFIXES:
                key = msvcrt.getch()
                if key == KEY_UP:
                    self.idx = max(0, self.idx - 1)
                elif key == KEY_DOWN:
                    self.idx = min(last, self.idx + 1)
            elif key == KEY_ENTER:
                return self.items[self.idx][1]
            elif key in CANCEL_KEYS:
                return None


class RichPrompter:
    """Prompter backed by rich prompts and Menu."""

    def __init__(self, console_: Console):
        self.console = console_

    def ask(self, question: str, default: str = "") -> str:
        return Prompt.ask(question, default=default, console=self.console).strip()

    def confirm(self, question: str, default: bool = True) -> bool:
        return Confirm.ask(question, default=default, console=self.console)

    def choose(self, title: str, items: Sequence[Tuple[str, Any]]) -> Optional[Any]:
        return Menu(self.console, list(items), title=title).show()
