"""Prompt templates (Jinja2 markdown with YAML front matter) and their builders."""

from ambient.prompts.loader import PromptLoader

__all__ = ["PromptLoader"]
