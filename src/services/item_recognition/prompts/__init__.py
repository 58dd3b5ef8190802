"""Prompt loading and rendering utilities."""

from services.item_recognition.prompts.loader import available_prompts, get_prompt_path, load_prompt, reload_prompts

__all__ = ["available_prompts", "get_prompt_path", "load_prompt", "reload_prompts"]
