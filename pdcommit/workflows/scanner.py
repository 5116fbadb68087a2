"""Workflow Scanner - Find workflow directories by their marker file."""

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MARKER = "workflow.yaml"

# Never descended into while scanning
IGNORED_DIRS = {'.git'}


class ScanError(Exception):
    """Raised when the project tree cannot be walked."""
    pass


@dataclass
class DetectedWorkflow:
    """A directory holding a marker file, plus its immediate subdirectories."""
    name: str
    directory: Path
    steps: list[str] = field(default_factory=list)

    def step_key(self, step: str) -> str:
        # git paths always use '/', so the composite key does too
        return f"{self.name}/{step}"

    @property
    def step_keys(self) -> list[str]:
        return [self.step_key(s) for s in self.steps]


def _raise(error: OSError) -> None:
    raise error


def scan(root: Path | str = '.', marker: str = DEFAULT_MARKER) -> list[DetectedWorkflow]:
    """Walk ``root`` and return every workflow directory found, in sorted walk order."""
    root = Path(root)
    detected = []

    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
            if marker not in filenames:
                continue

            directory = Path(dirpath)
            # A marker at the root of '.' has no usable base name
            name = root.resolve().name if directory == root else directory.name

            # os.walk lists symlinked directories too; they are not steps
            steps = [d for d in dirnames if not (directory / d).is_symlink()]
            detected.append(DetectedWorkflow(name=name, directory=directory, steps=steps))
    except OSError as e:
        raise ScanError(f"Error scanning the project directory: {e}")

    return detected
