"""Tests for artifact write-back: overwrite policy, backups and per-file failures."""

from datetime import datetime

from pipeline import ArtifactWriter
from pipeline.artifact_writer import BACKUP_DIR, CANCEL, OVERWRITE_ALL, SKIP_EXISTING


FILES = {
    "Dockerfile": "FROM node:18-alpine\n",
    "docker-compose.yml": "services:\n  app:\n    build: .\n",
    ".dockerignore": "node_modules\n",
}


def fixed_clock():
    return datetime(2024, 5, 1, 12, 30, 45, 123456)


class TestArtifactWriter:
    """Test writing into an output directory."""

    def test_writes_all_files(self, tmp_path):
        report = ArtifactWriter(tmp_path).write(FILES)
        assert report.ok
        assert sorted(p.name for p in report.written) == sorted(FILES)
        assert (tmp_path / "Dockerfile").read_text() == FILES["Dockerfile"]

    def test_creates_output_directory(self, tmp_path):
        out = tmp_path / "docker" / "generated"
        report = ArtifactWriter(out).write(FILES)
        assert report.ok
        assert (out / ".dockerignore").exists()

    def test_existing_skipped_without_callback(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM original\n")
        report = ArtifactWriter(tmp_path).write(FILES)
        assert report.skipped == ["Dockerfile"]
        assert (tmp_path / "Dockerfile").read_text() == "FROM original\n"
        assert (tmp_path / "docker-compose.yml").exists()

    def test_confirm_overwrite_all(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM original\n")
        asked = []

        def confirm(existing):
            asked.append(existing)
            return OVERWRITE_ALL

        report = ArtifactWriter(tmp_path, confirm_overwrite=confirm).write(FILES)
        assert asked == [["Dockerfile"]]
        assert report.skipped == []
        assert (tmp_path / "Dockerfile").read_text() == FILES["Dockerfile"]

    def test_confirm_skip_existing(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM original\n")
        report = ArtifactWriter(tmp_path, confirm_overwrite=lambda existing: SKIP_EXISTING).write(FILES)
        assert report.skipped == ["Dockerfile"]
        assert len(report.written) == 2

    def test_cancel_writes_nothing(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM original\n")
        report = ArtifactWriter(tmp_path, confirm_overwrite=lambda existing: CANCEL).write(FILES)
        assert report.cancelled
        assert not report.ok
        assert report.written == []
        assert not (tmp_path / "docker-compose.yml").exists()

    def test_callback_not_asked_when_nothing_exists(self, tmp_path):
        def confirm(existing):
            raise AssertionError("should not be asked")

        report = ArtifactWriter(tmp_path, confirm_overwrite=confirm).write(FILES)
        assert report.ok

    def test_overwrite_flag_replaces_without_asking(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM original\n")
        report = ArtifactWriter(tmp_path, overwrite=True).write(FILES)
        assert report.skipped == []
        assert (tmp_path / "Dockerfile").read_text() == FILES["Dockerfile"]

    def test_backup_before_overwrite(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM original\n")
        writer = ArtifactWriter(tmp_path, overwrite=True, backup=True, clock=fixed_clock)
        report = writer.write(FILES)

        expected = tmp_path / BACKUP_DIR / "Dockerfile.2024-05-01T12-30-45-123456.backup"
        assert report.backups == [expected]
        assert expected.read_text() == "FROM original\n"
        assert (tmp_path / "Dockerfile").read_text() == FILES["Dockerfile"]

    def test_no_backup_when_skipping(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM original\n")
        report = ArtifactWriter(tmp_path, backup=True).write(FILES)
        assert report.backups == []
        assert not (tmp_path / BACKUP_DIR).exists()

    def test_one_failure_does_not_stop_the_rest(self, tmp_path):
        # A directory in the way of a target file makes that single write fail
        (tmp_path / "Dockerfile").mkdir()
        report = ArtifactWriter(tmp_path, overwrite=True).write(FILES)

        assert [e.file_name for e in report.failed] == ["Dockerfile"]
        assert "Failed to write Dockerfile" in str(report.failed[0])
        assert sorted(p.name for p in report.written) == [".dockerignore", "docker-compose.yml"]
        assert not report.ok
        assert not [p for p in tmp_path.iterdir() if p.name.endswith(".tmp")]
