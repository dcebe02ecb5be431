"""Prompt construction for container artifact generation."""

from .prompt_builder import PromptBuilder, SYSTEM_PROMPT, TRUNCATION_MARKER
from .routing_rules import ROUTING_RULES, BASELINE_RULES, select_routing_rules

__all__ = [
    "PromptBuilder",
    "SYSTEM_PROMPT",
    "TRUNCATION_MARKER",
    "ROUTING_RULES",
    "BASELINE_RULES",
    "select_routing_rules",
]
