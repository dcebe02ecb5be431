"""Response parser: raw model text to a complete ArtifactSet.

Extraction is best-effort per slot. Anything missing or failing its sanity
check is filled from TemplateFallback, so parse() always returns a usable set.
"""

import logging
import re
from typing import Dict, Optional

from contracts import ArtifactSet, ArtifactSlot, ArtifactSource, StackDescriptor
from errors import ParseError
from fallback import SANITY_MESSAGES, TemplateFallback, check_slot
from parsing.json_extract import extract_json_object

logger = logging.getLogger(__name__)

# A fence opener at line start, its info string, an optional body, and a closing
# fence. Line endings may be LF or CRLF.
# Scanning with finditer consumes each closing fence so it is never read as an opener.
FENCED_BLOCK = re.compile(
    r"^```([\w.+-]*)[ \t]*\r?\n(?:(.*?)\r?\n)??```[ \t]*\r?$",
    re.MULTILINE | re.DOTALL,
)

# Info-string tags accepted for each slot; the empty tag is an untagged block
FENCE_TAGS: Dict[ArtifactSlot, frozenset] = {
    ArtifactSlot.BUILD_DEFINITION: frozenset({"dockerfile", "docker"}),
    ArtifactSlot.COMPOSE_DEFINITION: frozenset({"yaml", "yml"}),
    ArtifactSlot.EXCLUSION_LIST: frozenset({"", "dockerignore", "text", "plaintext", "txt"}),
    ArtifactSlot.PROXY_CONFIG: frozenset({"nginx", "conf"}),
    ArtifactSlot.NOTES: frozenset({"markdown", "md"}),
}


def extract_fenced_blocks(raw: str) -> Dict[ArtifactSlot, str]:
    """Pick the first fenced block for each slot, content unmodified."""
    found: Dict[ArtifactSlot, str] = {}
    for match in FENCED_BLOCK.finditer(raw or ""):
        tag = match.group(1).lower()
        for slot, tags in FENCE_TAGS.items():
            if tag in tags and slot not in found:
                found[slot] = match.group(2) or ""
                break
    return found


def extract_json_slots(raw: str) -> Dict[ArtifactSlot, str]:
    """Read the five contract keys from the embedded JSON object.

    Raises:
        ParseError: If the response holds no decodable object
    """
    data = extract_json_object(raw)
    found: Dict[ArtifactSlot, str] = {}
    for slot in ArtifactSlot:
        value = data.get(slot.value)
        if isinstance(value, str):
            found[slot] = value
    return found


class ResponseParser:
    """Turns raw model output into an ArtifactSet, never failing."""

    def __init__(
        self,
        output_contract: str = "fenced",
        include_proxy: bool = True,
        fallback: Optional[TemplateFallback] = None,
    ):
        """Initialize the parser.

        Args:
            output_contract: "fenced" or "json", matching the prompt's format instruction
            include_proxy: Whether a proxy config is wanted for frontend projects
            fallback: Template generator for missing slots
        """
        if output_contract not in ("fenced", "json"):
            raise ValueError(f"Unknown output contract: {output_contract}")
        self.output_contract = output_contract
        self.fallback = fallback or TemplateFallback(include_proxy=include_proxy)

    def extract(self, raw: str) -> Dict[ArtifactSlot, str]:
        if self.output_contract == "json":
            return extract_json_slots(raw)
        return extract_fenced_blocks(raw)

    def parse(self, raw: str, descriptor: StackDescriptor) -> ArtifactSet:
        """Extract artifacts from raw text and fill gaps from templates.

        Args:
            raw: Raw model output
            descriptor: Stack descriptor the prompt was built from

        Returns:
            ArtifactSet with every required slot non-empty
        """
        artifacts = ArtifactSet()
        try:
            extracted = self.extract(raw)
        except ParseError as e:
            logger.warning("Model response could not be parsed, using templates: %s", e)
            artifacts.warnings.append(str(e))
            extracted = {}

        wants_proxy = self.fallback.needs_proxy(descriptor)
        for slot, content in extracted.items():
            if slot == ArtifactSlot.PROXY_CONFIG and not wants_proxy:
                logger.debug("Dropping proxy config: not needed for this project")
                continue
            if not content.strip():
                continue
            if not check_slot(slot, content):
                message = f"{SANITY_MESSAGES[slot]}; using template instead"
                logger.warning(message)
                artifacts.warnings.append(message)
                continue
            artifacts.set(slot, content, ArtifactSource.EXTRACTED)

        for slot in self.fallback.required_slots(descriptor):
            if artifacts.is_empty(slot):
                logger.info("Filling %s from template", slot.value)
                artifacts.set(slot, self.fallback.generate(slot, descriptor), ArtifactSource.FALLBACK)
        return artifacts
