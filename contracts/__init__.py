"""Pydantic contracts for Auto Docker.

Every hand-off between pipeline stages is typed through these contracts.
"""

from .stack_contracts import (
    ProjectCategory,
    Ecosystem,
    FrontendFramework,
    BackendFramework,
    DatabaseType,
    FrontendInfo,
    BackendInfo,
    SampledFile,
    StackDescriptor,
    META_FRAMEWORKS,
    BUNDLER_FRAMEWORKS,
    PYTHON_BACKENDS,
    NODE_BACKENDS,
    GO_BACKENDS,
    PYTHON_SERVERS,
)

from .artifact_contracts import (
    ArtifactSlot,
    ArtifactSource,
    ArtifactSet,
    ARTIFACT_FILE_NAMES,
    JSON_CONTRACT_KEYS,
)

__all__ = [
    # Stack
    "ProjectCategory",
    "Ecosystem",
    "FrontendFramework",
    "BackendFramework",
    "DatabaseType",
    "FrontendInfo",
    "BackendInfo",
    "SampledFile",
    "StackDescriptor",
    "META_FRAMEWORKS",
    "BUNDLER_FRAMEWORKS",
    "PYTHON_BACKENDS",
    "NODE_BACKENDS",
    "GO_BACKENDS",
    "PYTHON_SERVERS",
    # Artifacts
    "ArtifactSlot",
    "ArtifactSource",
    "ArtifactSet",
    "ARTIFACT_FILE_NAMES",
    "JSON_CONTRACT_KEYS",
]
