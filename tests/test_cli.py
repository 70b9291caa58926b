"""End-to-end tests for the gitwapp CLI against real repositories."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import git
from gitwapp import cli
from gitwapp.cli import setup_logging
from gitwapp.lib.config import AppConfig


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Leave pytest's log capture handlers on the root logger alone."""
    monkeypatch.setattr(cli, "setup_logging", lambda config, verbose=False: None)


@pytest.fixture
def run(tmp_path, capsys):
    """Run the CLI with an isolated config dir; return (exit code, stdout, stderr)."""
    config_dir = tmp_path / "config"

    def _run(*argv):
        code = cli.main(["--config-dir", str(config_dir), *argv])
        out, err = capsys.readouterr()
        return code, out, err

    return _run


@pytest.fixture
def tracked(run, repo):
    code, out, _ = run("repo", "add", str(repo), "--name", "work")
    assert code == 0
    return repo


class TestRepoCommands:

    def test_add_and_list(self, run, repo):
        code, out, _ = run("repo", "add", str(repo))
        assert code == 0
        assert "Added work" in out

        code, out, _ = run("repo", "list", "--json")
        data = json.loads(out)
        assert [r["name"] for r in data] == ["work"]
        assert data[0]["path"] == str(repo)

    def test_add_invalid_path(self, run, tmp_path):
        code, out, err = run("repo", "add", str(tmp_path / "missing"))
        assert code == 1
        assert "ERROR:" in err
        assert out == ""

    def test_remove_unknown_reports_on_stderr(self, run):
        code, out, err = run("repo", "remove", "nope")
        assert code == 1
        assert "ERROR:" in err
        assert out == ""

    def test_remove(self, run, tracked):
        _, out, _ = run("repo", "list", "--json")
        repo_id = json.loads(out)[0]["id"]

        code, out, _ = run("repo", "remove", repo_id)
        assert code == 0
        _, out, _ = run("repo", "list")
        assert "No repositories tracked" in out

    def test_list_empty(self, run):
        code, out, _ = run("repo", "list")
        assert code == 0
        assert "No repositories tracked" in out


class TestRepoOperations:

    def test_unknown_repository_is_usage_error(self, run, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run("status", "nope")
        assert excinfo.value.code == 2
        out, err = capsys.readouterr()
        assert "ERROR:" in err
        assert "gitwapp repo list" in err
        assert out == ""

    def test_status_json(self, run, tracked):
        (tracked / "new.txt").write_text("new\n")
        code, out, _ = run("status", "work", "--json")
        assert code == 0
        data = json.loads(out)
        assert data["Clean"] is False
        assert data["Worktree"]["new.txt"]["Staging"] == 63

    def test_stage_commit_cycle(self, run, tracked):
        (tracked / "README.md").write_text("changed\n")

        code, out, _ = run("stage", "work", "README.md")
        assert code == 0 and "Staged README.md" in out

        code, out, _ = run("commit", "work", "-m", "Change readme")
        assert code == 0 and "Change readme" in out

        code, out, _ = run("status", "work")
        assert "State:   clean" in out
        assert git(tracked, "log", "-1", "--format=%s").strip() == "Change readme"

    def test_commit_empty_message(self, run, tracked):
        (tracked / "README.md").write_text("changed\n")
        run("stage-all", "work")
        code, _, err = run("commit", "work", "-m", "  ")
        assert code == 1
        assert "Commit message required" in err

    def test_stage_traversal(self, run, tracked):
        code, _, err = run("stage", "work", "../../etc/passwd")
        assert code == 1
        assert "ERROR:" in err

    def test_lock_contention_hint(self, run, tracked):
        (tracked / "README.md").write_text("changed\n")
        (tracked / ".git" / "index.lock").write_text("")
        code, _, err = run("stage", "work", "README.md")
        assert code == 1
        assert "try again" in err

    def test_push_without_remote(self, run, tracked):
        code, _, err = run("push", "work")
        assert code == 1
        assert "No remote 'origin'" in err

    def test_show_and_diff(self, run, tracked):
        (tracked / "README.md").write_text("hello\nworld\n")

        code, out, _ = run("show", "work", "README.md")
        assert code == 0
        assert out == "hello\nworld\n"

        code, out, _ = run("diff", "work", "README.md")
        assert code == 0
        assert "+world" in out

    def test_show_unreadable_file(self, run, tracked):
        with patch.object(Path, "read_bytes", side_effect=PermissionError(13, "Permission denied")):
            code, out, err = run("show", "work", "README.md")
        assert code == 1
        assert "Cannot read README.md" in err
        assert "Traceback" not in err
        assert out == ""

    def test_diff_unchanged(self, run, tracked):
        code, out, _ = run("diff", "work", "README.md")
        assert code == 0
        assert "No changes in README.md" in out

    def test_repository_deleted_after_registration(self, run, tracked, tmp_path):
        tracked.rename(tmp_path / "moved")
        code, _, err = run("status", "work")
        assert code == 1
        assert "does not exist" in err


class TestSetupLogging:

    def test_verbose_wins_over_config(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        log_file = tmp_path / "logs" / "gitwapp.log"
        config = AppConfig(config_dir=tmp_path, log_level="WARNING", log_file=log_file)
        try:
            setup_logging(config, verbose=True)
            assert root.level == logging.DEBUG
            assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
            assert log_file.parent.is_dir()
        finally:
            for handler in root.handlers:
                if handler not in saved_handlers:
                    handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
