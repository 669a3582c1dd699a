import io
from pathlib import Path

import pytest
from rich.console import Console

from vidgrab.core.config import ToolLayout, tool_source


class ScriptedPrompter:
    """Prompt provider that replays canned answers and records the questions."""

    def __init__(self, asks=(), confirms=(), choices=()):
        self.asks = list(asks)
        self.confirms = list(confirms)
        self.choices = list(choices)
        self.questions = []

    def ask(self, question, default=""):
        self.questions.append(("ask", question))
        return self.asks.pop(0)

    def confirm(self, question, default=True):
        self.questions.append(("confirm", question))
        return self.confirms.pop(0)

    def choose(self, title, items):
        self.questions.append(("choose", title))
        answer = self.choices.pop(0)
        if callable(answer):
            return answer(items)
        return answer


@pytest.fixture
def quiet_console():
    return Console(file=io.StringIO(), force_terminal=False, width=120)


@pytest.fixture
def linux_layout(tmp_path):
    return ToolLayout(home=tmp_path / "home", source=tool_source("linux"))

