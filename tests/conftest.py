"""Shared fixtures."""

import pytest
import yaml

from pdcommit.cli.utils import Prompter
from pdcommit.git import WorkingTreeStatus


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    """Plain output regardless of FORCE_COLOR in the environment."""
    monkeypatch.setattr("pdcommit.output.COLORS_ENABLED", False)


@pytest.fixture
def scripted():
    """Return a factory for a Prompter that answers from a list.

    Running out of answers behaves like Ctrl-D.
    """
    def _make(*answers):
        remaining = list(answers)
        asked = []

        def _input(text):
            asked.append(text)
            if not remaining:
                raise EOFError
            return remaining.pop(0)

        prompter = Prompter(input_func=_input)
        prompter.asked = asked
        prompter.remaining = remaining
        return prompter
    return _make


@pytest.fixture
def write_mapping():
    """Return a function that writes a mapping file into a directory."""
    def _write(directory, workflows, steps, schema="baudevs/2024-09-29"):
        path = directory / "pipedream-config.yaml"
        path.write_text(yaml.safe_dump({"schema": schema, "workflows": workflows, "steps": steps}, sort_keys=False))
        return path
    return _write


class FakeRepository:
    """Stands in for GitRepository; replays a sequence of statuses."""

    def __init__(self, *statuses, diff="", commit_error=None):
        self.statuses = list(statuses) or [WorkingTreeStatus()]
        self.diff = diff
        self.commit_error = commit_error
        self.commits = []
        self.staged_all = False

    def get_status(self):
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]

    def stage_all(self):
        self.staged_all = True

    def get_staged_diff(self):
        return self.diff

    def commit(self, message):
        if self.commit_error:
            raise self.commit_error
        self.commits.append(message)
        return "[main 1a2b3c4] " + message.split('\n')[0]


@pytest.fixture
def fake_repo(monkeypatch):
    """Return a function that installs a FakeRepository in the commit flow."""
    def _install(*statuses, **kwargs):
        repo = FakeRepository(*statuses, **kwargs)
        monkeypatch.setattr("pdcommit.cli.main.GitRepository", lambda: repo)
        return repo
    return _install


@pytest.fixture
def project(tmp_path):
    """A project with two workflows, a plain directory and a marker inside .git."""
    root = tmp_path / "project"
    for path in ["auth/login", "auth/logout", "billing/invoice", "docs/guides", ".git/hooks"]:
        (root / path).mkdir(parents=True)
    (root / "auth" / "workflow.yaml").write_text("name: auth\n")
    (root / "billing" / "workflow.yaml").write_text("name: billing\n")
    (root / ".git" / "hooks" / "workflow.yaml").write_text("")
    (root / "auth" / "login" / "handler.py").write_text("")
    return root
