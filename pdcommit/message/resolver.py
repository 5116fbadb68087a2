"""Label Resolver - Match changed files to workflow/step labels."""

import posixpath
from dataclasses import dataclass
from typing import Callable, Iterable

from pdcommit.workflows.mapping import WorkflowMapping


@dataclass(frozen=True)
class WorkflowStep:
    """A matched (workflow label, step label) pair."""
    workflow: str
    step: str

    def __str__(self) -> str:
        return f"{self.workflow}:{self.step}"


def resolve_labels(
    changed_paths: Iterable[str],
    mapping: WorkflowMapping,
    trace: Callable[[str], None] | None = None,
) -> list[WorkflowStep]:
    """Match every changed path's directory against the mapping keys.

    Matching is plain substring containment, so a workflow key 'auth' also
    matches a directory named 'authorization'. Step keys are checked against
    the whole directory, not only under the matched workflow. Repeated
    matches are kept.
    """
    labels = []

    for path in changed_paths:
        directory = posixpath.dirname(path) or '.'
        if trace:
            trace(f"Checking file: {path}")
            trace(f"Directory: {directory}")

        for wf_key, wf_label in mapping.workflows.items():
            if wf_key not in directory:
                continue
            if trace:
                trace(f"Matched workflow: {wf_key} -> {wf_label}")

            for step_key, step_label in mapping.steps.items():
                if step_key in directory:
                    if trace:
                        trace(f"Matched step: {step_key} -> {step_label}")
                    labels.append(WorkflowStep(wf_label, step_label))

    return labels
