"""Prompt loader utility."""

import logging
from pathlib import Path
from functools import lru_cache

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

FALLBACK_PROMPT = "You are a helpful, nonpartisan election assistant."


@lru_cache(maxsize=32)
def load_prompt(name: str = "default") -> str:
    """Load a prompt from the prompts directory.

    Args:
        name: Prompt name (without .md extension)

    Returns:
        Prompt content as string

    Example:
        prompt = load_prompt("default")
        prompt = render_prompt("election_assistant", title="ElectionSathi", election_context=briefing)
    """
    prompt_path = PROMPTS_DIR / f"{name}.md"

    if not prompt_path.exists():
        logger.warning(f"Prompt '{name}' not found, using default")
        prompt_path = PROMPTS_DIR / "default.md"

    if not prompt_path.exists():
        logger.error("Default prompt not found!")
        return FALLBACK_PROMPT

    return prompt_path.read_text(encoding="utf-8").strip()


def render_prompt(name: str, **values: str) -> str:
    """Load a prompt and fill its ``{placeholders}``."""
    return load_prompt(name).format(**values)
