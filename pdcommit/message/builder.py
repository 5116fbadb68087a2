"""Message Builder - Assemble the final commit message."""

from typing import Iterable

from pdcommit.message.resolver import WorkflowStep


def format_annotation(label: WorkflowStep | tuple[str, str]) -> str:
    workflow, step = (label.workflow, label.step) if isinstance(label, WorkflowStep) else label
    return f"[[{workflow}][{step}]]"


def build_message(commit_type: str, labels: Iterable[WorkflowStep | tuple[str, str]], text: str) -> str:
    """``<type>[[wf][step]]... <text>``, with the text kept verbatim."""
    annotations = ''.join(format_annotation(label) for label in labels)
    return f"{commit_type}{annotations} {text}"


def command_preview(message: str) -> str:
    """The git command shown for review. Quotes inside the message are not escaped."""
    return f'git commit -m "{message}"'
