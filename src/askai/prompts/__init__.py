"""The fixed system prompt sent with every question.

A ``prompts/system.txt`` in the working directory replaces the packaged one.
"""

from pathlib import Path

PROMPT_FILE = "system.txt"


def get_system_prompt() -> str:
    """Read the system prompt, preferring ``./prompts/system.txt``."""
    override = Path.cwd() / "prompts" / PROMPT_FILE
    path = override if override.is_file() else Path(__file__).with_name(PROMPT_FILE)
    return path.read_text(encoding="utf-8").strip()


__all__ = ["get_system_prompt"]
