"""Git Operations Package"""

from pdcommit.git.repository import GitRepository, GitError, WorkingTreeStatus, parse_porcelain

__all__ = [
    "GitRepository",
    "GitError",
    "WorkingTreeStatus",
    "parse_porcelain",
]
