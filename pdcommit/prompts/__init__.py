"""Prompt Construction Package"""

from pdcommit.prompts.builder import PromptBuilder, PromptConfig, truncate_diff

__all__ = [
    "PromptBuilder",
    "PromptConfig",
    "truncate_diff",
]
