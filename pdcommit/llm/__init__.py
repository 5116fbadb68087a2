"""LLM Client Package

Used only by ``pdcommit --suggest`` to draft the free-text part of a message.
"""

from pdcommit.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, validate_summary
from pdcommit.llm.claude import ClaudeClient
from pdcommit.llm.ollama import OllamaClient

PROVIDERS = {
    "claude": ClaudeClient,
    "ollama": OllamaClient,
}

AUTO_DETECT_ORDER = ["ollama", "claude"]


def get_client(provider: str = "auto", model: str | None = None) -> LLMClient:
    """Get an LLM client. Provider can be 'claude', 'ollama', or 'auto'.

    'auto' tries a local Ollama first and falls back to Claude; the error
    lists why each provider was skipped.
    """
    if provider in PROVIDERS:
        return PROVIDERS[provider](model=model)

    if provider != "auto":
        raise LLMError(f"Unknown provider: {provider}. Use 'claude', 'ollama', or 'auto'.")

    reasons = []
    for name in AUTO_DETECT_ORDER:
        try:
            return PROVIDERS[name](model=model)
        except LLMError as e:
            reasons.append(f"  {name}: {str(e).splitlines()[0]}")

    raise LLMError(
        "No LLM provider available for --suggest.\n"
        + "\n".join(reasons) + "\n\n"
        "Option 1 - Use Ollama (free, local):\n"
        "  ollama serve && ollama pull mistral:7b\n\n"
        "Option 2 - Use Claude API:\n"
        "  export ANTHROPIC_API_KEY='your-key-here'"
    )


__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "ClaudeClient",
    "OllamaClient",
    "get_client",
    "PROVIDERS",
    "SYSTEM_PROMPT",
    "validate_summary",
]
