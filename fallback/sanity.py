"""Minimal structural sanity checks for generated artifacts.

These are keyword heuristics, not parsers for the target configuration
languages. A failing check marks the slot for template substitution.
"""

import re
from typing import Callable, Dict, Optional

from contracts import ArtifactSlot

_SERVER_BLOCK = re.compile(r"\bserver\s*\{")


def has_base_image(content: str) -> bool:
    return "FROM" in content


def has_services_section(content: str) -> bool:
    return "services:" in content


def has_server_block(content: str) -> bool:
    return bool(_SERVER_BLOCK.search(content))


def _non_blank(content: str) -> bool:
    return bool(content.strip())


SANITY_CHECKS: Dict[ArtifactSlot, Callable[[str], bool]] = {
    ArtifactSlot.BUILD_DEFINITION: has_base_image,
    ArtifactSlot.COMPOSE_DEFINITION: has_services_section,
    ArtifactSlot.PROXY_CONFIG: has_server_block,
    ArtifactSlot.EXCLUSION_LIST: _non_blank,
    ArtifactSlot.NOTES: _non_blank,
}

SANITY_MESSAGES: Dict[ArtifactSlot, str] = {
    ArtifactSlot.BUILD_DEFINITION: "Dockerfile has no FROM instruction",
    ArtifactSlot.COMPOSE_DEFINITION: "docker-compose.yml has no services: section",
    ArtifactSlot.PROXY_CONFIG: "nginx.conf has no server block",
    ArtifactSlot.EXCLUSION_LIST: ".dockerignore is blank",
    ArtifactSlot.NOTES: "notes are blank",
}


def check_slot(slot: ArtifactSlot, content: Optional[str]) -> bool:
    """Return True if content is non-empty and passes the slot's check."""
    if not content or not content.strip():
        return False
    return SANITY_CHECKS[slot](content)
