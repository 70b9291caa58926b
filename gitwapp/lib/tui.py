"""Shared TUI components for the gitwapp dashboard."""

from rich.markup import escape
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Label, Static


class ConfirmModal(ModalScreen[bool]):
    """Yes/no confirmation, with an optional detail line under the question."""

    CSS = """
    ConfirmModal {
        align: center middle;
    }

    #confirm-dialog {
        width: auto;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $warning;
    }

    #confirm-message {
        text-style: bold;
    }

    #confirm-detail {
        margin-bottom: 1;
    }

    #confirm-hint {
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__()
        self.message = message
        self.detail = detail

    def compose(self) -> ComposeResult:
        yield Container(
            Static(escape(self.message), id="confirm-message"),
            Static(escape(self.detail), id="confirm-detail"),
            Static(escape("[y]es / [n]o"), id="confirm-hint"),
            id="confirm-dialog",
        )

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class CommitModal(ModalScreen[str]):
    """Prompt for a commit message. Dismisses with "" on cancel."""

    CSS = """
    CommitModal {
        align: center middle;
    }

    #commit-dialog {
        width: 70;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    #commit-hint {
        margin-top: 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, staged_count: int) -> None:
        super().__init__()
        self.staged_count = staged_count

    def compose(self) -> ComposeResult:
        yield Container(
            Label(f"Commit {self.staged_count} staged file(s). Message:"),
            Input(placeholder="Describe the change...", id="commit-input"),
            Label("Press Enter to commit, Escape to cancel", id="commit-hint"),
            id="commit-dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#commit-input", Input).focus()

    @on(Input.Submitted)
    def on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss("")


class ContentScreen(ModalScreen):
    """Full screen text viewer (for diffs)."""

    BINDINGS = [
        Binding("q", "back", "Back"),
        Binding("escape", "back", "Back"),
    ]

    def __init__(self, content: str, title: str = "") -> None:
        super().__init__()
        self.content = content
        self.screen_title = title

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(
            Static(colorize_diff(self.content), id="content-body"),
            id="content-scroll",
        )
        yield Footer()

    def on_mount(self) -> None:
        if self.screen_title:
            self.title = self.screen_title

    def action_back(self) -> None:
        self.app.pop_screen()


def colorize_diff(diff: str) -> str:
    """Rich markup for a unified diff: additions green, removals red, hunks cyan."""
    lines = []
    for line in diff.splitlines():
        text = escape(line)
        if line.startswith(("+++", "---")):
            lines.append(f"[bold]{text}[/bold]")
        elif line.startswith("+"):
            lines.append(f"[green]{text}[/green]")
        elif line.startswith("-"):
            lines.append(f"[red]{text}[/red]")
        elif line.startswith("@@"):
            lines.append(f"[cyan]{text}[/cyan]")
        else:
            lines.append(text)
    return "\n".join(lines)
