"""LLM Base Classes and Shared Code"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pdcommit import COMMIT_TYPE_NAMES


SYSTEM_PROMPT = """You write the free-text part of git commit messages for a project organized into workflows and steps.

The commit type and the workflow/step annotations are added by a tool. You write ONLY the sentence that follows them.

Your standards:
- One line, imperative mood, lowercase start, no trailing period
- Say what the change does for the workflow step, not which files moved
- Specific verbs over vague ones (never "update", "change", "modify")
- No type prefixes, no brackets, no quotes, no preamble"""

MAX_SUMMARY_LENGTH = 120

_TYPE_PREFIX_RE = re.compile(rf"^({'|'.join(COMMIT_TYPE_NAMES)}|feat|chore|refactor)(\[\[|\(|!?:)", re.IGNORECASE)


def validate_summary(content: str) -> tuple[bool, str]:
    """Validate that a response is a bare one-line summary."""
    if not content or len(content.strip()) < 5:
        return False, "Response too short"

    first_line = content.strip().split('\n')[0]
    if _TYPE_PREFIX_RE.match(first_line):
        return False, f"Summary must not start with a commit type. Got: {first_line[:50]}"
    if len(first_line) > MAX_SUMMARY_LENGTH:
        return False, f"Summary longer than {MAX_SUMMARY_LENGTH} characters"

    return True, ""


@dataclass
class LLMResponse:
    """Structured response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


class LLMError(Exception):
    """Raised when LLM operations fail."""
    pass


class LLMClient(ABC):
    """Abstract base for LLM clients."""

    MAX_RETRIES = 2

    @abstractmethod
    def _complete(self, prompt: str) -> LLMResponse:
        """Send one prompt and return the raw response."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    def generate(self, prompt: str) -> LLMResponse:
        """Ask for a summary, re-prompting when the response is malformed."""
        last_error = ""
        for attempt in range(self.MAX_RETRIES + 1):
            retry_prompt = prompt
            if attempt > 0:
                retry_prompt = f"{prompt}\n\nIMPORTANT: Your previous response was invalid ({last_error}). Reply with the summary sentence only."

            response = self._complete(retry_prompt)
            is_valid, last_error = validate_summary(response.content)
            if is_valid:
                return response

        raise LLMError(f"Failed after {self.MAX_RETRIES} retries: {last_error}")
