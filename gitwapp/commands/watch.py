"""
gitwapp watch - Live repository dashboard.

Interactive TUI that re-reads the repository status on a fixed interval and
lets the user stage, unstage, commit, push, pull and view diffs.
"""

from typing import Optional

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from gitwapp.commands.status import format_sync
from gitwapp.git import (
    FileStatus,
    GitError,
    StatusCode,
    StatusSnapshot,
    commit,
    get_file_diff,
    get_status,
    pull,
    push,
    stage_all,
    stage_file,
    unstage_all,
    unstage_file,
)
from gitwapp.lib.config import AppConfig
from gitwapp.lib.registry import RepositoryRecord
from gitwapp.lib.tui import CommitModal, ConfirmModal, ContentScreen

STATUS_LETTERS = {
    StatusCode.UNMODIFIED: " ",
    StatusCode.UNTRACKED: "?",
    StatusCode.MODIFIED: "M",
    StatusCode.ADDED: "A",
    StatusCode.DELETED: "D",
    StatusCode.RENAMED: "R",
    StatusCode.COPIED: "C",
    StatusCode.UPDATED_BUT_UNMERGED: "U",
}


def format_entry(path: str, status: FileStatus, selected: bool) -> str:
    """One file row: cursor, staged checkbox, both status letters, path."""
    cursor = ">" if selected else " "
    check = "[x]" if status.is_staged else "[ ]"
    letters = STATUS_LETTERS[status.staging] + STATUS_LETTERS[status.worktree]
    color = "green" if status.is_staged else ("red" if not status.is_untracked else "yellow")
    return f"{cursor} {escape(check)} [{color}]{escape(letters)}[/{color}] {escape(path)}"


class SummaryWidget(Static):
    """Branch, sync and clean/dirty header."""

    snapshot: reactive[Optional[StatusSnapshot]] = reactive(None)
    error: reactive[str] = reactive("")

    def render(self) -> str:
        if self.error:
            return f"[red]{escape(self.error)}[/red]"
        if not self.snapshot:
            return "Loading..."

        snap = self.snapshot
        state = "[green]clean[/green]" if snap.clean else "[yellow]dirty[/yellow]"
        return "\n".join([
            f"Branch: [bold]{escape(snap.branch)}[/bold]",
            f"Sync:   {escape(format_sync(snap))}",
            f"State:  {state}  ({len(snap.staged_files())} staged, {len(snap.entries)} changed)",
        ])


class FileListWidget(Static):
    """Changed files with a movable cursor."""

    entries: reactive[list] = reactive(list, always_update=True)
    cursor: reactive[int] = reactive(0)

    def render(self) -> str:
        if not self.entries:
            return "[dim]No changes[/dim]"
        return "\n".join(
            format_entry(path, status, i == self.cursor)
            for i, (path, status) in enumerate(self.entries)
        )

    def selected(self) -> Optional[tuple[str, FileStatus]]:
        if not self.entries:
            return None
        return self.entries[min(self.cursor, len(self.entries) - 1)]


class WatchApp(App):
    """Main dashboard application."""

    CSS = """
    #main-container {
        layout: vertical;
        padding: 1;
    }

    #summary-box {
        border: solid green;
        padding: 0 1;
        height: auto;
        margin-bottom: 1;
    }

    #files-box {
        border: solid blue;
        padding: 0 1;
        height: 1fr;
    }

    #content-scroll {
        height: 1fr;
    }

    #content-body {
        padding: 1;
    }
    """

    BINDINGS = [
        Binding("up,k", "cursor_up", "Up", show=False),
        Binding("down,j", "cursor_down", "Down", show=False),
        Binding("space", "toggle", "Stage/Unstage"),
        Binding("a", "stage_all", "Stage all"),
        Binding("A", "unstage_all", "Unstage all"),
        Binding("c", "commit", "Commit"),
        Binding("d", "show_diff", "Diff"),
        Binding("p", "push", "Push"),
        Binding("P", "pull", "Pull"),
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, record: RepositoryRecord, config: AppConfig) -> None:
        super().__init__()
        self.record = record
        self.config = config
        self.snapshot: Optional[StatusSnapshot] = None
        self._error_notified = False
        self._sync_running = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Container(SummaryWidget(id="summary"), id="summary-box"),
            Container(FileListWidget(id="files"), id="files-box"),
            id="main-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.title = f"gitwapp: {self.record.name}"
        self.sub_title = str(self.record.path)
        self.refresh_data()
        self.set_interval(self.config.poll_interval, self.refresh_data)

    def refresh_data(self) -> None:
        """Recompute the status snapshot and redraw."""
        summary = self.query_one("#summary", SummaryWidget)
        files = self.query_one("#files", FileListWidget)

        try:
            snapshot = get_status(
                self.record.path,
                remote=self.config.remote_name,
                traversal_limit=self.config.traversal_limit,
            )
        except GitError as e:
            summary.error = str(e)
            if not self._error_notified:
                self.notify(f"Status unavailable: {e}", severity="error")
                self._error_notified = True
            return

        self._error_notified = False
        self.snapshot = snapshot

        # Keep the cursor on the same file across refreshes
        previous = files.selected()
        entries = sorted(snapshot.entries.items())
        files.entries = entries
        if previous:
            paths = [path for path, _ in entries]
            if previous[0] in paths:
                files.cursor = paths.index(previous[0])
        files.cursor = min(files.cursor, max(len(entries) - 1, 0))

        summary.error = ""
        summary.snapshot = snapshot

    def _run(self, action: str, func, *args) -> bool:
        """Run an operation, report failure as a notification, refresh either way."""
        try:
            func(*args)
        except GitError as e:
            severity = "warning" if e.retryable else "error"
            self.notify(f"{action} failed: {e}", severity=severity)
            return False
        finally:
            self.refresh_data()
        return True

    def action_cursor_up(self) -> None:
        files = self.query_one("#files", FileListWidget)
        files.cursor = max(files.cursor - 1, 0)

    def action_cursor_down(self) -> None:
        files = self.query_one("#files", FileListWidget)
        files.cursor = min(files.cursor + 1, max(len(files.entries) - 1, 0))

    def action_refresh(self) -> None:
        self.refresh_data()

    def action_toggle(self) -> None:
        """Stage the selected file, or unstage it if it is already staged."""
        selected = self.query_one("#files", FileListWidget).selected()
        if not selected:
            self.notify("Nothing selected", severity="warning")
            return

        path, status = selected
        if status.is_staged:
            self._run("Unstage", unstage_file, self.record.path, path)
        else:
            self._run("Stage", stage_file, self.record.path, path)

    def action_stage_all(self) -> None:
        if self._run("Stage all", stage_all, self.record.path):
            self.notify("Staged all changes", severity="information")

    def action_unstage_all(self) -> None:
        if self._run("Unstage all", unstage_all, self.record.path):
            self.notify("Unstaged all changes", severity="information")

    def action_commit(self) -> None:
        """Prompt for a message and commit the staged changes."""
        staged = self.snapshot.staged_files() if self.snapshot else []
        if not staged:
            self.notify("Nothing staged to commit", severity="warning")
            return

        repo_path = self.record.path

        def handle_message(message: str) -> None:
            if not message.strip():
                self.notify("Commit cancelled", severity="information")
                return
            if self._run("Commit", commit, repo_path, message):
                self.notify("Committed", severity="information")

        self.push_screen(CommitModal(len(staged)), handle_message)

    def action_show_diff(self) -> None:
        """Show the diff of the selected file. Untracked files have none."""
        selected = self.query_one("#files", FileListWidget).selected()
        if not selected:
            self.notify("Nothing selected", severity="warning")
            return

        path, status = selected
        if status.is_untracked:
            self.notify("Diff not available for untracked files", severity="warning")
            return

        try:
            diff = get_file_diff(self.record.path, path)
        except GitError as e:
            self.notify(f"Diff failed: {e}", severity="error")
            return

        if diff:
            self.push_screen(ContentScreen(diff, title=f"Diff: {path}"))
        else:
            self.notify("No changes to show", severity="warning")

    def _start_sync(self, action: str, func, message: str) -> None:
        if self._sync_running:
            self.notify("A push or pull is already running", severity="warning")
            return
        self._sync_running = True
        self.notify(message, severity="information")
        self._sync_worker(action, func, self.record.path, self.config.remote_name, self.config.network_timeout)

    @work(thread=True, group="sync")
    def _sync_worker(self, action: str, func, *args) -> None:
        self._sync_with_remote(action, func, *args)

    def _sync_with_remote(self, action: str, func, *args) -> None:
        """Run a push or pull off the event loop, reporting back through it."""
        try:
            func(*args)
        except GitError as e:
            severity = "warning" if e.retryable else "error"
            self.call_from_thread(self.notify, f"{action} failed: {e}", severity=severity)
        else:
            self.call_from_thread(self.notify, f"{action} complete", severity="information")
        finally:
            self._sync_running = False
            self.call_from_thread(self.refresh_data)

    def action_push(self) -> None:
        remote = self.config.remote_name

        def handle_confirm(confirmed: bool) -> None:
            if confirmed:
                self._start_sync("Push", push, f"Pushing to {remote}...")

        branch = self.snapshot.branch if self.snapshot else "current branch"
        detail = format_sync(self.snapshot) if self.snapshot else ""
        self.push_screen(ConfirmModal(f"Push {branch} to {remote}?", detail), handle_confirm)

    def action_pull(self) -> None:
        self._start_sync("Pull", pull, f"Pulling from {self.config.remote_name}...")


def cmd_watch(args, record: RepositoryRecord, config: AppConfig) -> int:
    """Open the dashboard for a repository."""
    app = WatchApp(record, config)
    app.run()
    return 0
