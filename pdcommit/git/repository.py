"""Git Repository - Working tree status, staging and committing via the git CLI."""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class WorkingTreeStatus:
    """Changed paths split by whether they are staged for commit."""
    staged: list[str] = field(default_factory=list)
    unstaged: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.staged and not self.unstaged

    @property
    def has_unstaged(self) -> bool:
        return len(self.unstaged) > 0


class GitError(Exception):
    """Raised when git operations fail."""
    pass


def parse_porcelain(output: str) -> WorkingTreeStatus:
    """Parse ``git status --porcelain -z`` output.

    Each entry is ``XY path``; X is the index state, Y the worktree state.
    Renames and copies are followed by an extra NUL-terminated source path.
    Untracked files ('??') only count as unstaged.
    """
    status = WorkingTreeStatus()
    entries = output.split('\0')
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue

        x, y, path = entry[0], entry[1], entry[3:]
        if x in ('R', 'C'):
            i += 1  # skip the original path

        if x == '?' and y == '?':
            status.unstaged.append(path)
            continue
        if x not in (' ', '!'):
            status.staged.append(path)
        if y not in (' ', '!'):
            status.unstaged.append(path)

    return status


class GitRepository:
    """Thin wrapper over the git executable for the current repository."""

    def __init__(self, cwd: Path | str | None = None):
        self.cwd = str(cwd) if cwd else None
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        try:
            result = subprocess.run(
                ['git', *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{(e.stderr or e.stdout).strip()}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    def get_status(self) -> WorkingTreeStatus:
        return parse_porcelain(self._run_git('status', '--porcelain', '-z', '--untracked-files=all'))

    def stage_all(self) -> None:
        self._run_git('add', '.')

    def get_staged_diff(self) -> str:
        return self._run_git('diff', '--staged')

    def commit(self, message: str) -> str:
        """Commit the index with ``message``. Returns git's output."""
        return self._run_git('commit', '-m', message)
