"""Prompt Builder - Construct LLM prompts for the commit summary."""

import re
from dataclasses import dataclass, field

from pdcommit import COMMIT_TYPES
from pdcommit.message import WorkflowStep, build_message


@dataclass
class PromptConfig:
    """Context that shapes the summary prompt."""
    commit_type: str = "fix"
    labels: list[WorkflowStep] = field(default_factory=list)
    hint: str | None = None
    max_diff_chars: int = 12000


class PromptBuilder:
    """Constructs the prompt asking for the free-text part of a commit message."""

    def build(self, diff: str, config: PromptConfig | None = None) -> str:
        config = config or PromptConfig()
        sections = [
            self._build_context_section(config),
            self._build_diff_section(diff, config.max_diff_chars),
            self._build_hints_section(config),
            self._build_final_instructions(config),
        ]
        return "\n\n".join(filter(None, sections))

    def _build_context_section(self, config: PromptConfig) -> str:
        description = COMMIT_TYPES.get(config.commit_type, config.commit_type)
        if config.labels:
            steps = "\n".join(f"  - workflow '{label.workflow}', step '{label.step}'" for label in _unique(config.labels))
        else:
            steps = "  - (none)"
        return f"""<context>
Commit type: {config.commit_type} ({description})
Workflow steps touched:
{steps}
</context>"""

    def _build_diff_section(self, diff: str, max_chars: int) -> str:
        if not diff.strip():
            return ""
        body, truncated = truncate_diff(diff, max_chars)
        note = "\n(Diff truncated due to size; remaining files omitted.)" if truncated else ""
        return f"<diff>\n{body}\n</diff>{note}"

    def _build_hints_section(self, config: PromptConfig) -> str:
        if not config.hint:
            return ""
        return f"<hint>\n{config.hint}\n</hint>"

    def _build_final_instructions(self, config: PromptConfig) -> str:
        example = build_message(config.commit_type, config.labels[:1], "<your summary>")
        return f"""The final message will look like:
  {example}

Reply with <your summary> only: one line, imperative mood, no prefix."""


def _unique(labels: list[WorkflowStep]) -> list[WorkflowStep]:
    return list(dict.fromkeys(labels))


def split_diff_by_file(diff: str) -> list[tuple[str, str]]:
    """Split a unified diff into (path, chunk) pairs in diff order."""
    files = []
    current_file = None
    current_lines = []

    for line in diff.split('\n'):
        if line.startswith('diff --git'):
            if current_file:
                files.append((current_file, '\n'.join(current_lines)))
            match = re.search(r'diff --git a/(.+?) b/', line)
            current_file = match.group(1) if match else line
            current_lines = [line]
        elif current_file:
            current_lines.append(line)

    if current_file:
        files.append((current_file, '\n'.join(current_lines)))

    return files


def truncate_diff(diff: str, max_chars: int) -> tuple[str, bool]:
    """Keep whole files while they fit in ``max_chars``; always keep part of the first."""
    if len(diff) <= max_chars:
        return diff, False

    kept = []
    used = 0
    for _, chunk in split_diff_by_file(diff):
        if used + len(chunk) > max_chars:
            if not kept:
                kept.append(chunk[:max_chars])
            break
        kept.append(chunk)
        used += len(chunk) + 1

    if not kept:
        kept.append(diff[:max_chars])
    return '\n'.join(kept), True
