"""Utility modules."""

from .prompt_loader import load_prompt, render_prompt

__all__ = ["load_prompt", "render_prompt"]
