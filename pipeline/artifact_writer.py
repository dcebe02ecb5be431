"""Write-back of generated artifacts.

Owns existence checks, the overwrite policy, optional backups and atomic
per-file writes. A failing file is reported and the rest are still written.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from errors import WriteError

logger = logging.getLogger(__name__)

BACKUP_DIR = ".docker-backup"

# Answers to the overwrite question
OVERWRITE_ALL = "overwrite"
SKIP_EXISTING = "skip"
CANCEL = "cancel"


@dataclass
class WriteReport:
    """Outcome of one write-back."""
    written: List[Path] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[WriteError] = field(default_factory=list)
    backups: List[Path] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.cancelled


class ArtifactWriter:
    """Writes a file-name -> content mapping into an output directory."""

    def __init__(
        self,
        output_dir: Path,
        overwrite: bool = False,
        backup: bool = False,
        confirm_overwrite: Optional[Callable[[List[str]], str]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the writer.

        Args:
            output_dir: Directory the artifacts are written into
            overwrite: Replace existing files without asking
            backup: Copy existing files to .docker-backup before replacing them
            confirm_overwrite: Asked with the existing file names when overwrite is off;
                returns OVERWRITE_ALL, SKIP_EXISTING or CANCEL. Without it, existing
                files are skipped.
            clock: Time source for backup file names
        """
        self.output_dir = Path(output_dir)
        self.overwrite = overwrite
        self.backup = backup
        self.confirm_overwrite = confirm_overwrite
        self.clock = clock

    def existing_files(self, file_names: List[str]) -> List[str]:
        return [name for name in file_names if (self.output_dir / name).exists()]

    def write(self, files: Dict[str, str]) -> WriteReport:
        """Write every file, honoring the overwrite policy.

        Args:
            files: Canonical file name -> content

        Returns:
            WriteReport listing written, skipped and failed files
        """
        report = WriteReport()
        existing = self.existing_files(list(files))
        policy = self._overwrite_policy(existing)

        if policy == CANCEL:
            logger.info("Write cancelled; existing files left untouched")
            report.cancelled = True
            report.skipped = list(files)
            return report

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            report.failed = [WriteError(name, str(e)) for name in files]
            return report

        if self.backup and existing and policy == OVERWRITE_ALL:
            report.backups = self.backup_files(existing)

        for name, content in files.items():
            if name in existing and policy == SKIP_EXISTING:
                report.skipped.append(name)
                continue
            target = self.output_dir / name
            try:
                self._atomic_write(target, content)
            except OSError as e:
                error = WriteError(name, str(e))
                logger.error(str(error))
                report.failed.append(error)
                continue
            logger.debug("Wrote %s", target)
            report.written.append(target)
        return report

    def backup_files(self, file_names: List[str]) -> List[Path]:
        """Copy existing files to .docker-backup/<name>.<timestamp>.backup."""
        backup_dir = self.output_dir / BACKUP_DIR
        stamp = self.clock().isoformat().replace(":", "-").replace(".", "-")
        backups: List[Path] = []
        for name in file_names:
            source = self.output_dir / name
            destination = backup_dir / f"{name}.{stamp}.backup"
            try:
                backup_dir.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
            except OSError as e:
                logger.warning("Could not back up %s: %s", name, e)
                continue
            backups.append(destination)
        return backups

    def _overwrite_policy(self, existing: List[str]) -> str:
        if not existing or self.overwrite:
            return OVERWRITE_ALL
        if self.confirm_overwrite is None:
            return SKIP_EXISTING
        answer = self.confirm_overwrite(existing)
        if answer not in (OVERWRITE_ALL, SKIP_EXISTING, CANCEL):
            return SKIP_EXISTING
        return answer

    @staticmethod
    def _atomic_write(target: Path, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
