"""Workspace scanning: the file-system side of stack detection.

Collects the pattern-filtered file listing, reads the root manifests once, and
picks a bounded sample of file contents to show the model.
"""

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from config import EXCLUDED_DIRS, SCAN_PATTERNS
from detector.manifests import ENV_FILE, MANIFEST_FILES

logger = logging.getLogger(__name__)

# Files sampled ahead of the rest of the listing, in this order
PRIORITY_SAMPLES: List[str] = MANIFEST_FILES + [
    "Dockerfile",
    "docker-compose.yml",
    "docker-compose.yaml",
    "vite.config.js",
    "vite.config.ts",
    "next.config.js",
    "angular.json",
    "manage.py",
    "app.py",
    "main.py",
    "wsgi.py",
    "server.js",
    "index.js",
    "src/index.js",
    "src/main.ts",
    "main.go",
]

# Never sampled: secrets and noisy lock files
SAMPLE_EXCLUDED_SUFFIXES = (".lock", "-lock.json", ".env")


@dataclass
class WorkspaceSnapshot:
    """Everything the detector needs from disk, read once per run."""
    root: Path
    files: List[str] = field(default_factory=list)
    manifests: Dict[str, str] = field(default_factory=dict)
    samples: List[Tuple[str, str]] = field(default_factory=list)


class WorkspaceScanner:
    """Lists and reads project files under a root directory."""

    def __init__(
        self,
        patterns: Optional[Sequence[str]] = None,
        excluded_dirs: Optional[Sequence[str]] = None,
        max_files_per_pattern: int = 100,
        max_samples: int = 50,
    ):
        self.patterns = list(patterns or SCAN_PATTERNS)
        self.excluded_dirs = set(excluded_dirs or EXCLUDED_DIRS)
        self.max_files_per_pattern = max_files_per_pattern
        self.max_samples = max_samples

    def scan(self, root: Path) -> WorkspaceSnapshot:
        """Scan a project directory.

        Args:
            root: Project root directory

        Returns:
            WorkspaceSnapshot with sorted listing, manifests and samples

        Raises:
            NotADirectoryError: If root is not an existing directory
        """
        root = Path(root)
        if not root.is_dir():
            raise NotADirectoryError(f"Project directory not found: {root}")

        files = self.list_files(root)
        return WorkspaceSnapshot(
            root=root,
            files=files,
            manifests=self.read_manifests(root),
            samples=self.read_samples(root, files),
        )

    def list_files(self, root: Path) -> List[str]:
        counts = {pattern: 0 for pattern in self.patterns}
        found: List[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dirs)
            for filename in sorted(filenames):
                rel = Path(dirpath, filename).relative_to(root).as_posix()
                for pattern in self.patterns:
                    if not fnmatch.fnmatch(filename, pattern):
                        continue
                    if counts[pattern] < self.max_files_per_pattern:
                        counts[pattern] += 1
                        found.append(rel)
                    break
        return sorted(set(found))

    def read_manifests(self, root: Path) -> Dict[str, str]:
        manifests: Dict[str, str] = {}
        for name in MANIFEST_FILES + [ENV_FILE]:
            text = self._read_text(root / name)
            if text is not None:
                manifests[name] = text
        return manifests

    def read_samples(self, root: Path, files: List[str]) -> List[Tuple[str, str]]:
        ordered = [p for p in PRIORITY_SAMPLES if p in files]
        ordered += [p for p in files if p not in ordered]

        samples: List[Tuple[str, str]] = []
        for rel in ordered:
            if len(samples) >= self.max_samples:
                break
            if rel.endswith(SAMPLE_EXCLUDED_SUFFIXES) or Path(rel).name == ENV_FILE:
                continue
            text = self._read_text(root / rel)
            if text is not None:
                samples.append((rel, text))
        return samples

    @staticmethod
    def _read_text(path: Path) -> Optional[str]:
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return None
