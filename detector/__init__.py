"""Stack detection: manifest reading, workspace scanning, classification."""

from .manifests import MANIFEST_FILES, ENV_FILE, read_manifests, read_env_var_names
from .stack_detector import StackDetector, detect_stack, build_output_dir_for
from .workspace import WorkspaceScanner, WorkspaceSnapshot

__all__ = [
    "MANIFEST_FILES",
    "ENV_FILE",
    "read_manifests",
    "read_env_var_names",
    "StackDetector",
    "detect_stack",
    "build_output_dir_for",
    "WorkspaceScanner",
    "WorkspaceSnapshot",
]
