"""Artifact contracts for generated container deployment files."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ArtifactSlot(str, Enum):
    """Named artifact slots. Values double as the JSON output-contract keys."""
    BUILD_DEFINITION = "dockerfile"
    COMPOSE_DEFINITION = "docker_compose"
    PROXY_CONFIG = "nginx_conf"
    EXCLUSION_LIST = "dockerignore"
    NOTES = "notes"


class ArtifactSource(str, Enum):
    """Where the content of a slot came from."""
    EXTRACTED = "extracted"
    FALLBACK = "fallback"


# Canonical file names handed to the write-back step
ARTIFACT_FILE_NAMES: Dict[ArtifactSlot, str] = {
    ArtifactSlot.BUILD_DEFINITION: "Dockerfile",
    ArtifactSlot.COMPOSE_DEFINITION: "docker-compose.yml",
    ArtifactSlot.EXCLUSION_LIST: ".dockerignore",
    ArtifactSlot.PROXY_CONFIG: "nginx.conf",
    ArtifactSlot.NOTES: "README-Docker.md",
}

# Order of the JSON keys in the structured output contract
JSON_CONTRACT_KEYS: List[str] = [
    ArtifactSlot.BUILD_DEFINITION.value,
    ArtifactSlot.COMPOSE_DEFINITION.value,
    ArtifactSlot.PROXY_CONFIG.value,
    ArtifactSlot.EXCLUSION_LIST.value,
    ArtifactSlot.NOTES.value,
]


class ArtifactSet(BaseModel):
    """The five generated configuration outputs for one run."""

    build_definition: str = ""
    compose_definition: str = ""
    exclusion_list: str = ""
    proxy_config: Optional[str] = None
    notes: Optional[str] = None
    sources: Dict[ArtifactSlot, ArtifactSource] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)

    def get(self, slot: ArtifactSlot) -> Optional[str]:
        return getattr(self, _FIELD_BY_SLOT[slot])

    def set(self, slot: ArtifactSlot, content: Optional[str], source: ArtifactSource) -> None:
        setattr(self, _FIELD_BY_SLOT[slot], content)
        if content:
            self.sources[slot] = source
        else:
            self.sources.pop(slot, None)

    def is_empty(self, slot: ArtifactSlot) -> bool:
        value = self.get(slot)
        return value is None or not value.strip()

    @property
    def used_fallback(self) -> bool:
        return ArtifactSource.FALLBACK in self.sources.values()

    def to_files(self) -> Dict[str, str]:
        """Map canonical file names to content, skipping empty optional slots."""
        files: Dict[str, str] = {}
        for slot, file_name in ARTIFACT_FILE_NAMES.items():
            if not self.is_empty(slot):
                files[file_name] = self.get(slot)
        return files


_FIELD_BY_SLOT: Dict[ArtifactSlot, str] = {
    ArtifactSlot.BUILD_DEFINITION: "build_definition",
    ArtifactSlot.COMPOSE_DEFINITION: "compose_definition",
    ArtifactSlot.EXCLUSION_LIST: "exclusion_list",
    ArtifactSlot.PROXY_CONFIG: "proxy_config",
    ArtifactSlot.NOTES: "notes",
}
