"""Tests for watch dashboard helpers and status formatting."""

from pathlib import Path
from datetime import datetime, timezone
from unittest.mock import Mock

from gitwapp.commands.status import format_status, format_sync
from gitwapp.commands.watch import STATUS_LETTERS, WatchApp, format_entry
from gitwapp.git import FileStatus, LockContentionError, NonFastForwardError, StatusCode, StatusSnapshot
from gitwapp.lib.config import AppConfig
from gitwapp.lib.registry import RepositoryRecord
from gitwapp.lib.tui import CommitModal, ConfirmModal, colorize_diff


def _snapshot(**kwargs) -> StatusSnapshot:
    defaults = dict(clean=True, branch="main", ahead=0, behind=0)
    defaults.update(kwargs)
    return StatusSnapshot(**defaults)


def _record() -> RepositoryRecord:
    return RepositoryRecord(
        id="abc",
        name="work",
        path=Path("/repos/work"),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestFormatSync:
    """Tests for format_sync."""

    def test_up_to_date(self):
        assert format_sync(_snapshot()) == "up to date with remote-tracking branch"

    def test_ahead_and_behind(self):
        assert format_sync(_snapshot(ahead=2, behind=1)) == "ahead 2, behind 1"

    def test_only_behind(self):
        assert format_sync(_snapshot(behind=3)) == "behind 3"

    def test_unknown_is_distinguishable_from_zero(self):
        text = format_sync(_snapshot(divergence_known=False))
        assert "unknown" in text
        assert text != format_sync(_snapshot())


class TestFormatEntry:
    """Tests for format_entry."""

    def test_every_status_code_has_a_letter(self):
        assert set(STATUS_LETTERS) == set(StatusCode)

    def test_staged_entry(self):
        status = FileStatus(StatusCode.MODIFIED, StatusCode.UNMODIFIED)
        line = format_entry("src/app.py", status, selected=True)
        assert line.startswith(">")
        assert "\\[x]" in line
        assert "[green]M [/green]" in line
        assert line.endswith("src/app.py")

    def test_untracked_entry(self):
        status = FileStatus(StatusCode.UNTRACKED, StatusCode.UNTRACKED)
        line = format_entry("new.txt", status, selected=False)
        assert line.startswith(" ")
        assert "[yellow]??[/yellow]" in line

    def test_markup_in_path_is_escaped(self):
        status = FileStatus(StatusCode.UNMODIFIED, StatusCode.MODIFIED)
        line = format_entry("[bold]x", status, selected=False)
        assert line.endswith("\\[bold]x")


class TestColorizeDiff:
    """Tests for colorize_diff."""

    def test_colors_by_line_kind(self):
        diff = "--- a/f\n+++ b/f\n@@ -1 +1 @@\n-old\n+new\n context"
        lines = colorize_diff(diff).splitlines()
        assert lines[0] == "[bold]--- a/f[/bold]"
        assert lines[1] == "[bold]+++ b/f[/bold]"
        assert lines[2].startswith("[cyan]")
        assert lines[3] == "[red]-old[/red]"
        assert lines[4] == "[green]+new[/green]"
        assert lines[5] == " context"

    def test_escapes_markup(self):
        assert colorize_diff("+[red]x") == "[green]+\\[red]x[/green]"


class TestFormatStatus:
    """Tests for the plain status report."""

    def test_sections(self):
        snapshot = _snapshot(
            clean=False,
            ahead=1,
            entries={
                "a.txt": FileStatus(StatusCode.ADDED, StatusCode.UNMODIFIED),
                "b.txt": FileStatus(StatusCode.UNMODIFIED, StatusCode.MODIFIED),
                "c.txt": FileStatus(StatusCode.UNTRACKED, StatusCode.UNTRACKED),
                "d.txt": FileStatus(StatusCode.RENAMED, StatusCode.UNMODIFIED, extra="old.txt"),
            },
        )
        text = format_status(_record(), snapshot)
        assert "Branch:  main" in text
        assert "Sync:    ahead 1" in text
        assert "State:   dirty" in text
        assert "new file:   a.txt" in text
        assert "renamed:    d.txt (from old.txt)" in text
        assert "modified:   b.txt" in text
        assert "Untracked:\n  c.txt" in text

    def test_clean(self):
        text = format_status(_record(), _snapshot())
        assert "State:   clean" in text
        assert "Staged:" not in text


class TestModals:
    """Modal construction."""

    def test_confirm_modal_keeps_message(self):
        modal = ConfirmModal("Push main to origin?", "ahead 1")
        assert modal.message == "Push main to origin?"
        assert modal.detail == "ahead 1"

    def test_confirm_modal_detail_optional(self):
        assert ConfirmModal("Pull?").detail == ""

    def test_commit_modal_keeps_count(self):
        assert CommitModal(3).staged_count == 3


class TestRemoteSync:
    """Push and pull run in a worker thread and report back through the app."""

    def _app(self, tmp_path) -> WatchApp:
        app = WatchApp(_record(), AppConfig(config_dir=tmp_path))
        app.call_from_thread = lambda callback, *args, **kwargs: callback(*args, **kwargs)
        app.notify = Mock()
        app.refresh_data = Mock()
        return app

    def test_success_notifies_and_refreshes(self, tmp_path):
        app = self._app(tmp_path)
        op = Mock()
        app._sync_running = True
        app._sync_with_remote("Push", op, Path("/repos/work"), "origin", 60)

        op.assert_called_once_with(Path("/repos/work"), "origin", 60)
        app.notify.assert_called_once_with("Push complete", severity="information")
        app.refresh_data.assert_called_once()
        assert not app._sync_running

    def test_rejected_push_is_an_error(self, tmp_path):
        app = self._app(tmp_path)
        op = Mock(side_effect=NonFastForwardError("Updates were rejected"))
        app._sync_with_remote("Push", op)
        app.notify.assert_called_once_with("Push failed: Updates were rejected", severity="error")
        app.refresh_data.assert_called_once()

    def test_retryable_failure_is_a_warning(self, tmp_path):
        app = self._app(tmp_path)
        op = Mock(side_effect=LockContentionError("index.lock exists"))
        app._sync_with_remote("Pull", op)
        assert app.notify.call_args.kwargs["severity"] == "warning"

    def test_second_sync_refused_while_running(self, tmp_path):
        app = self._app(tmp_path)
        app._sync_running = True
        op = Mock()
        app._start_sync("Pull", op, "Pulling from origin...")
        op.assert_not_called()
        app.notify.assert_called_once_with("A push or pull is already running", severity="warning")
