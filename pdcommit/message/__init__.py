"""Commit Message Package"""

from pdcommit.message.resolver import WorkflowStep, resolve_labels
from pdcommit.message.builder import build_message, format_annotation, command_preview

__all__ = [
    "WorkflowStep",
    "resolve_labels",
    "build_message",
    "format_annotation",
    "command_preview",
]
