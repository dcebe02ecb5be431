"""Tests for the generation pipeline, session state and preview gate."""

import json
import threading

import pytest
from unittest.mock import MagicMock

from config import Settings
from contracts import ArtifactSet, ArtifactSlot, ArtifactSource
from errors import ProviderError
from pipeline import ConsolePreview, GenerationPipeline, SessionState
from pipeline.preview import PROMPT_THREAD_NAME
from rich.console import Console


VALID_RESPONSE = "\n\n".join([
    "```dockerfile\nFROM python:3.11-slim\nCMD [\"python\", \"app.py\"]\n```",
    "```yaml\nservices:\n  app:\n    build: .\n```",
    "```\n.git\n.env\n```",
])


class FakePreview:
    def __init__(self, answer: bool):
        self.answer = answer
        self.seen = []

    def confirm(self, artifacts):
        self.seen.append(artifacts)
        return self.answer


@pytest.fixture
def flask_project(tmp_path):
    (tmp_path / "requirements.txt").write_text("flask==3.0\n")
    (tmp_path / "app.py").write_text("from flask import Flask\napp = Flask(__name__)\n")
    return tmp_path


@pytest.fixture
def config():
    return Settings(openai_api_key="", include_nginx=True, overwrite_files=False)


def invoker_returning(text):
    invoker = MagicMock()
    invoker.invoke.return_value = text
    return invoker


class TestSessionState:
    def test_welcome_shown_once(self):
        session = SessionState()
        assert session.consume_welcome() is True
        assert session.consume_welcome() is False
        assert session.has_shown_welcome


class TestGenerationPipeline:
    """Test end-to-end runs with a fake invoker."""

    def test_run_writes_extracted_files(self, flask_project, config):
        invoker = invoker_returning(VALID_RESPONSE)
        pipeline = GenerationPipeline(config=config, invoker=invoker)
        result = pipeline.run(flask_project, SessionState())

        assert result.accepted
        assert sorted(result.written_files) == [".dockerignore", "Dockerfile", "docker-compose.yml"]
        assert (flask_project / "Dockerfile").read_text().startswith("FROM python:3.11-slim")
        assert result.artifacts.sources[ArtifactSlot.BUILD_DEFINITION] == ArtifactSource.EXTRACTED
        prompt = invoker.invoke.call_args[0][0]
        assert "flask" in prompt
        assert result.prompt == prompt

    def test_fallback_only_never_invokes(self, flask_project, config):
        invoker = invoker_returning(VALID_RESPONSE)
        pipeline = GenerationPipeline(config=config, invoker=invoker)
        result = pipeline.run(flask_project, SessionState(), fallback_only=True)

        invoker.invoke.assert_not_called()
        assert result.prompt is None
        assert "README-Docker.md" in result.written_files
        assert "gunicorn" in (flask_project / "Dockerfile").read_text()

    def test_garbage_response_still_produces_files(self, flask_project, config):
        pipeline = GenerationPipeline(config=config, invoker=invoker_returning("Sorry, I can't."))
        result = pipeline.run(flask_project, SessionState())
        assert result.artifacts.used_fallback
        assert (flask_project / "docker-compose.yml").read_text().startswith("services:")

    def test_rejected_preview_writes_nothing(self, flask_project, config):
        preview = FakePreview(answer=False)
        pipeline = GenerationPipeline(config=config, invoker=invoker_returning(VALID_RESPONSE))
        result = pipeline.run(flask_project, SessionState(), preview=preview)

        assert len(preview.seen) == 1
        assert not result.accepted
        assert result.report is None
        assert not (flask_project / "Dockerfile").exists()

    def test_accepted_preview_writes(self, flask_project, config):
        pipeline = GenerationPipeline(config=config, invoker=invoker_returning(VALID_RESPONSE))
        result = pipeline.run(flask_project, SessionState(), preview=FakePreview(answer=True))
        assert result.accepted
        assert (flask_project / "Dockerfile").exists()

    def test_provider_error_propagates(self, flask_project, config):
        invoker = MagicMock()
        invoker.invoke.side_effect = ProviderError("rate limited", provider="openai", attempts=3)
        pipeline = GenerationPipeline(config=config, invoker=invoker)
        with pytest.raises(ProviderError):
            pipeline.run(flask_project, SessionState())
        assert not (flask_project / "Dockerfile").exists()

    def test_output_path_setting(self, flask_project):
        config = Settings(openai_api_key="", docker_output_path="deploy")
        pipeline = GenerationPipeline(config=config, invoker=invoker_returning(VALID_RESPONSE))
        pipeline.run(flask_project, SessionState())
        assert (flask_project / "deploy" / "Dockerfile").exists()

    def test_chain_mode_parses_json(self, flask_project):
        config = Settings(openai_api_key="", generation_mode="chain")
        raw = json.dumps({
            "dockerfile": "FROM python:3.11-slim",
            "docker_compose": "services:\n  app:\n    build: .",
            "dockerignore": ".git",
        })
        pipeline = GenerationPipeline(config=config, invoker=invoker_returning(raw))
        result = pipeline.run(flask_project, SessionState())
        assert result.artifacts.build_definition == "FROM python:3.11-slim"
        assert "dockerfile, docker_compose" in result.prompt

    def test_descriptor_reused(self, flask_project, config):
        pipeline = GenerationPipeline(config=config, invoker=invoker_returning(VALID_RESPONSE))
        descriptor = pipeline.analyze(flask_project)
        pipeline.scanner = MagicMock()
        pipeline.run(flask_project, SessionState(), descriptor=descriptor)
        pipeline.scanner.scan.assert_not_called()


class TestConsolePreview:
    """Test preview rendering and the confirmation timeout."""

    @pytest.fixture
    def artifacts(self):
        artifacts = ArtifactSet()
        artifacts.set(ArtifactSlot.BUILD_DEFINITION, "FROM alpine", ArtifactSource.EXTRACTED)
        artifacts.set(ArtifactSlot.COMPOSE_DEFINITION, "services:\n  app: {}", ArtifactSource.FALLBACK)
        artifacts.warnings.append("Compose file has no [services] section")
        return artifacts

    def test_accept(self, artifacts):
        console = Console(record=True, width=100)
        assert ConsolePreview(console=console, ask=lambda: True).confirm(artifacts) is True
        output = console.export_text()
        assert "Dockerfile" in output
        assert "docker-compose.yml" in output
        assert "[services]" in output
        assert "Template fallback used for: docker_compose" in output

    def test_reject(self, artifacts):
        preview = ConsolePreview(console=Console(record=True), ask=lambda: False)
        assert preview.confirm(artifacts) is False

    def test_interrupt_counts_as_reject(self, artifacts):
        def ask():
            raise EOFError

        preview = ConsolePreview(console=Console(record=True), ask=ask)
        assert preview.confirm(artifacts) is False

    def test_timeout_counts_as_reject(self, artifacts):
        release = threading.Event()
        console = Console(record=True)
        preview = ConsolePreview(console=console, timeout=0.05, ask=lambda: release.wait(5))
        try:
            assert preview.confirm(artifacts) is False
        finally:
            release.set()
        assert "nothing written" in console.export_text()

    def test_blocked_prompt_thread_is_daemon(self, artifacts):
        release = threading.Event()
        preview = ConsolePreview(console=Console(record=True), timeout=0.05, ask=lambda: release.wait(5))
        try:
            assert preview.confirm(artifacts) is False
            pending = [t for t in threading.enumerate() if t.name == PROMPT_THREAD_NAME and t.is_alive()]
            assert pending
            assert all(t.daemon for t in pending)
        finally:
            release.set()
