"""Configuration constants and settings for termchat."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


# ── Defaults ────────────────────────────────────────────────────────

OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
DEFAULT_MODEL = os.environ.get("TERMCHAT_MODEL", "gpt-3.5-turbo")
DEFAULT_MAX_TOKENS = 2048
HIGHLIGHT_STYLE = os.environ.get("TERMCHAT_STYLE", "monokai")

TERMCHAT_HOME = Path(os.environ.get("TERMCHAT_HOME", Path.home() / ".termchat"))
TRANSCRIPTS_DIR = TERMCHAT_HOME / "transcripts"
HISTORY_FILE = TERMCHAT_HOME / "history"


# ── Built-in prompts ────────────────────────────────────────────────

BUILTIN_PROMPTS: dict[str, str] = {
    "assistant": (
        "You are a helpful assistant answering in a terminal. "
        "Use `backticks` for inline code and fenced ``` blocks with a "
        "language tag for code."
    ),
    "shell": (
        "You are a Unix shell expert. Answer with a single fenced ```sh "
        "block containing the command, followed by one short sentence."
    ),
    "reviewer": (
        "You are a careful code reviewer. Point out bugs first, then style. "
        "Quote the code you discuss in fenced blocks."
    ),
}

EDIT_SYSTEM_PROMPT = (
    "You edit files. Reply with the complete new file content only, "
    "with no explanation and no surrounding code fence."
)


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL
    base_url: str = OPENAI_BASE_URL
    max_tokens: int = DEFAULT_MAX_TOKENS
    style: str = HIGHLIGHT_STYLE
    transcripts_dir: Path = TRANSCRIPTS_DIR
    debug: bool = False


def load_settings(args: object) -> Settings:
    """Build :class:`Settings` from parsed CLI args plus the environment.

    Raises :class:`ValueError` when no API key is available.
    """
    api_key = getattr(args, "api_key", None) or os.environ.get("OPENAI_API_KEY", "")
    if not api_key:
        raise ValueError("An API key is required: pass --api-key or set OPENAI_API_KEY")
    return Settings(
        api_key=api_key,
        model=getattr(args, "model", None) or DEFAULT_MODEL,
        base_url=(getattr(args, "base_url", None) or OPENAI_BASE_URL).rstrip("/"),
        max_tokens=getattr(args, "max_tokens", None) or DEFAULT_MAX_TOKENS,
        style=getattr(args, "style", None) or HIGHLIGHT_STYLE,
        debug=bool(getattr(args, "debug", False)),
    )
