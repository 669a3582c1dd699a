"""Tests for the interactive session state machine."""
import json
from pathlib import Path

import pytest

from conftest import ScriptedPrompter
from vidgrab.core.history import FolderHistory
from vidgrab.core.models import MediaStatus, Mode, ProvisioningResult
from vidgrab.ui import CURRENT_DIR, NEW_PATH, Session, SessionState


class FakeRunner:
    def __init__(self, code=0, error=None):
        self.code = code
        self.error = error
        self.calls = []

    def __call__(self, exe, args, cwd):
        self.calls.append((exe, list(args), cwd))
        if self.error is not None:
            raise self.error
        return self.code


@pytest.fixture
def result(tmp_path):
    exe = tmp_path / "bin" / "yt-dlp"
    exe.parent.mkdir(parents=True)
    exe.write_bytes(b"")
    return ProvisioningResult(
        advanced_enabled=True,
        tool_bin_dir=tmp_path / "ffmpeg" / "bin",
        downloader=exe,
        media_status=MediaStatus.FUNCTIONAL,
    )


@pytest.fixture
def history(tmp_path):
    return FolderHistory(tmp_path / "history.json")


def make_session(result, prompter, history, console, runner=None):
    return Session(
        result, prompter, history,
        console_=console,
        runner=runner or FakeRunner(),
        predictor=lambda url: None,
    )


def output(console):
    return console.file.getvalue()


class TestFullRun:
    def test_single_job_end_to_end(self, result, history, quiet_console, tmp_path):
        out_dir = tmp_path / "downloads" / "music"
        prompter = ScriptedPrompter(
            asks=["https://www.youtube.com/watch?v=abc123", str(out_dir)],
            choices=[Mode.AUDIO, NEW_PATH],
            confirms=[True, False],
        )
        runner = FakeRunner(code=0)
        session = make_session(result, prompter, history, quiet_console, runner)

        assert session.run() == 0
        assert out_dir.is_dir()
        assert len(runner.calls) == 1
        exe, args, cwd = runner.calls[0]
        assert exe == result.downloader
        assert cwd == out_dir
        assert args[-1] == "https://www.youtube.com/watch?v=abc123"
        assert "--embed-metadata" in args and "--embed-thumbnail" not in args
        assert list(history) == [str(out_dir)]
        assert json.loads((tmp_path / "history.json").read_text(encoding="utf-8")) == [str(out_dir)]
        assert "DOWNLOAD COMPLETED SUCCESSFULLY" in output(quiet_console)

    def test_two_jobs_then_exit(self, result, history, quiet_console, tmp_path):
        a, b = tmp_path / "a", tmp_path / "b"
        prompter = ScriptedPrompter(
            asks=["https://youtu.be/one", str(a), "https://youtu.be/two", str(b)],
            choices=[Mode.BEST_720, NEW_PATH, Mode.UP_TO_1080, NEW_PATH],
            confirms=[True, True, True, False],
        )
        runner = FakeRunner()
        assert make_session(result, prompter, history, quiet_console, runner).run() == 0
        assert [c[2] for c in runner.calls] == [a, b]
        assert list(history) == [str(b), str(a)]


class TestCollectUrl:
    def test_scenario_c_unknown_domain_declined(self, result, history, quiet_console):
        prompter = ScriptedPrompter(asks=["https://example.org/watch/1"], confirms=[False])
        session = make_session(result, prompter, history, quiet_console)

        assert session.collect_url() is SessionState.COLLECT_URL
        assert session.url == ""
        assert not any(kind == "choose" for kind, _ in prompter.questions)

    def test_unknown_domain_accepted(self, result, history, quiet_console):
        prompter = ScriptedPrompter(asks=["https://example.org/watch/1"], confirms=[True])
        session = make_session(result, prompter, history, quiet_console)
        assert session.collect_url() is SessionState.COLLECT_MODE
        assert session.url == "https://example.org/watch/1"

    @pytest.mark.parametrize("raw", ["", "   ", "definitely not a url"])
    def test_invalid_input_reprompts_without_confirmation(self, result, history, quiet_console, raw):
        prompter = ScriptedPrompter(asks=[raw])
        session = make_session(result, prompter, history, quiet_console)
        assert session.collect_url() is SessionState.COLLECT_URL
        assert prompter.questions == [("ask", "Enter the video/playlist URL")]

    def test_known_site_needs_no_confirmation(self, result, history, quiet_console):
        prompter = ScriptedPrompter(asks=["  https://vimeo.com/42  "])
        session = make_session(result, prompter, history, quiet_console)
        assert session.collect_url() is SessionState.COLLECT_MODE
        assert session.url == "https://vimeo.com/42"


class TestCollectMode:
    def test_cancelled_menu_goes_back_to_url(self, result, history, quiet_console):
        session = make_session(result, ScriptedPrompter(choices=[None]), history, quiet_console)
        assert session.collect_mode() is SessionState.COLLECT_URL

    def test_custom_mode_asks_about_embedding_with_ffmpeg(self, result, history, quiet_console):
        prompter = ScriptedPrompter(choices=[Mode.CUSTOM], asks=["bestvideo+bestaudio"], confirms=[True])
        session = make_session(result, prompter, history, quiet_console)
        assert session.collect_mode() is SessionState.COLLECT_FOLDER
        assert session.custom_format == "bestvideo+bestaudio"
        assert session.custom_embed is True

    def test_custom_mode_without_ffmpeg_skips_embedding_question(self, result, history, quiet_console):
        no_ffmpeg = ProvisioningResult(False, result.tool_bin_dir, result.downloader)
        prompter = ScriptedPrompter(choices=[Mode.CUSTOM], asks=[""])
        session = make_session(no_ffmpeg, prompter, history, quiet_console)
        assert session.collect_mode() is SessionState.COLLECT_FOLDER
        assert session.custom_embed is False
        assert [k for k, _ in prompter.questions] == ["choose", "ask"]


class TestCollectFolder:
    def prime(self, session):
        session.url = "https://youtu.be/abc"
        session.mode = Mode.BEST_720

    def test_history_entry_moves_to_front(self, result, history, quiet_console, tmp_path):
        a, b = tmp_path / "a", tmp_path / "b"
        history.remember(str(a))
        history.remember(str(b))
        prompter = ScriptedPrompter(choices=[str(a)])
        session = make_session(result, prompter, history, quiet_console)
        self.prime(session)

        assert session.collect_folder() is SessionState.CONFIRM
        assert session.job.folder == a
        assert a.is_dir()
        assert list(history) == [str(a), str(b)]

    def test_history_entries_are_offered(self, result, history, quiet_console, tmp_path):
        history.remember(str(tmp_path / "a"))
        seen = []

        def pick_current(items):
            seen.extend(value for _, value in items)
            return CURRENT_DIR

        session = make_session(result, ScriptedPrompter(choices=[pick_current]), history, quiet_console)
        self.prime(session)
        session.collect_folder()
        assert seen == [str(tmp_path / "a"), NEW_PATH, CURRENT_DIR]

    def test_history_is_read_when_the_menu_opens(self, result, history, quiet_console, tmp_path):
        target = tmp_path / "added-later"
        session = make_session(result, ScriptedPrompter(choices=[lambda items: items[0][1]]), history, quiet_console)
        self.prime(session)
        (tmp_path / "history.json").write_text(json.dumps([str(target)]), encoding="utf-8")

        assert session.collect_folder() is SessionState.CONFIRM
        assert session.job.folder == target

    def test_current_directory_is_not_recorded(self, result, history, quiet_console, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        session = make_session(result, ScriptedPrompter(choices=[CURRENT_DIR]), history, quiet_console)
        self.prime(session)

        assert session.collect_folder() is SessionState.CONFIRM
        assert session.job.folder == Path.cwd()
        assert list(history) == []

    def test_new_path_reprompts_when_empty(self, result, history, quiet_console, tmp_path):
        target = tmp_path / "new"
        prompter = ScriptedPrompter(choices=[NEW_PATH], asks=["", str(target)])
        session = make_session(result, prompter, history, quiet_console)
        self.prime(session)
        assert session.collect_folder() is SessionState.CONFIRM
        assert session.job.folder == target

    def test_creation_failure_returns_to_url(self, result, history, quiet_console, tmp_path):
        blocker = tmp_path / "file.txt"
        blocker.write_text("x")
        prompter = ScriptedPrompter(choices=[NEW_PATH], asks=[str(blocker / "sub")])
        session = make_session(result, prompter, history, quiet_console)
        self.prime(session)

        assert session.collect_folder() is SessionState.COLLECT_URL
        assert list(history) == []
        assert "could not create the folder" in output(quiet_console)

    def test_cancelled_menu_goes_back_to_url(self, result, history, quiet_console):
        session = make_session(result, ScriptedPrompter(choices=[None]), history, quiet_console)
        self.prime(session)
        assert session.collect_folder() is SessionState.COLLECT_URL


class TestRunAndReport:
    def run_job(self, result, history, console, tmp_path, runner, confirms=()):
        from vidgrab.core.models import DownloadJob
        session = make_session(result, ScriptedPrompter(confirms=list(confirms)), history, console, runner)
        session.job = DownloadJob(url="https://youtu.be/abc123", mode=Mode.BEST_720, folder=tmp_path)
        return session, session.run_job()

    def test_declined_summary_skips_run(self, result, history, quiet_console, tmp_path):
        from vidgrab.core.models import DownloadJob
        runner = FakeRunner()
        session = make_session(result, ScriptedPrompter(confirms=[False]), history, quiet_console, runner)
        session.job = DownloadJob(url="https://youtu.be/x", mode=Mode.AUDIO, folder=tmp_path)
        assert session.confirm() is SessionState.ASK_REPEAT
        assert runner.calls == []

    def test_nonzero_exit_code_is_reported(self, result, history, quiet_console, tmp_path):
        session, state = self.run_job(result, history, quiet_console, tmp_path, FakeRunner(code=2))
        assert state is SessionState.REPORT
        assert session.report() is SessionState.ASK_REPEAT
        assert "Exit code: 2" in output(quiet_console)

    def test_spawn_error_is_reported_distinctly(self, result, history, quiet_console, tmp_path):
        runner = FakeRunner(error=FileNotFoundError("yt-dlp not found"))
        session, state = self.run_job(result, history, quiet_console, tmp_path, runner)
        session.report()
        text = output(quiet_console)
        assert "ERROR running yt-dlp" in text
        assert "yt-dlp not found" in text
        assert "Exit code" not in text

    def test_existing_file_declined(self, result, history, quiet_console, tmp_path):
        (tmp_path / "Clip [abc123].mp4").write_bytes(b"v")
        runner = FakeRunner()
        session, state = self.run_job(result, history, quiet_console, tmp_path, runner, confirms=[False])
        assert state is SessionState.COLLECT_URL
        assert runner.calls == []

    def test_existing_file_overwrite(self, result, history, quiet_console, tmp_path):
        (tmp_path / "Clip [abc123].mp4").write_bytes(b"v")
        runner = FakeRunner()
        session, state = self.run_job(result, history, quiet_console, tmp_path, runner, confirms=[True])
        assert state is SessionState.REPORT
        assert "--force-overwrites" in runner.calls[0][1]

    def test_ask_repeat(self, result, history, quiet_console):
        assert make_session(result, ScriptedPrompter(confirms=[True]), history, quiet_console).ask_repeat() is SessionState.COLLECT_URL
        assert make_session(result, ScriptedPrompter(confirms=[False]), history, quiet_console).ask_repeat() is SessionState.EXIT
