"""Prompt templates used when relaying conversations to the model."""

from .response_format import RESPONSE_FORMAT_INSTRUCTIONS, build_system_prompt  # noqa: F401
