"""Generation pipeline - entry point wiring detection, prompting, invocation and parsing.

The pipeline:
1. Scans the workspace and detects the stack
2. Builds the prompt for the configured output contract
3. Invokes the configured model (or skips it in fallback-only runs)
4. Parses the response, filling gaps from templates
5. Hands the artifact set to the preview gate and the writer
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from config import Settings, settings as default_settings
from contracts import ArtifactSet, ArtifactSource, StackDescriptor
from detector import StackDetector, WorkspaceScanner
from fallback import TemplateFallback
from logging_setup import LOGGER_NAME
from parsing import ResponseParser
from prompts import PromptBuilder
from providers import ModelInvoker, create_invoker

from pipeline.artifact_writer import ArtifactWriter, WriteReport
from pipeline.preview import PreviewGate


@dataclass
class SessionState:
    """Per-session state shared by every run in one CLI process."""
    has_shown_welcome: bool = False
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(LOGGER_NAME))

    def consume_welcome(self) -> bool:
        """True the first time it is called in a session."""
        if self.has_shown_welcome:
            return False
        self.has_shown_welcome = True
        return True


@dataclass
class GenerationResult:
    """Everything one run produced."""
    descriptor: StackDescriptor
    artifacts: ArtifactSet
    prompt: Optional[str] = None
    raw_response: Optional[str] = None
    accepted: bool = True
    report: Optional[WriteReport] = None

    @property
    def written_files(self) -> List[str]:
        return [p.name for p in self.report.written] if self.report else []


class GenerationPipeline:
    """Runs one analysis-and-generation pass over a project directory."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        invoker: Optional[ModelInvoker] = None,
        scanner: Optional[WorkspaceScanner] = None,
        detector: Optional[StackDetector] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        parser: Optional[ResponseParser] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Settings for this run (defaults to the global settings)
            invoker: Model invoker; built from config on first use when omitted
            scanner: Workspace scanner
            detector: Stack detector
            prompt_builder: Prompt builder
            parser: Response parser
        """
        self.config = config or default_settings
        self._invoker = invoker
        self.scanner = scanner or WorkspaceScanner(
            max_files_per_pattern=self.config.max_listed_files,
            max_samples=self.config.max_sampled_files,
        )
        self.detector = detector or StackDetector(
            max_sampled_files=self.config.max_sampled_files,
            max_file_chars=self.config.max_file_chars,
        )
        self.fallback = TemplateFallback(include_proxy=self.config.include_nginx)
        self.prompt_builder = prompt_builder or PromptBuilder(
            output_contract=self.config.output_contract,
            include_proxy=self.config.include_nginx,
            max_file_chars=self.config.max_file_chars,
        )
        self.parser = parser or ResponseParser(
            output_contract=self.config.output_contract,
            fallback=self.fallback,
        )

    @property
    def invoker(self) -> ModelInvoker:
        if self._invoker is None:
            self._invoker = create_invoker(self.config)
        return self._invoker

    def analyze(self, project_root: Path) -> StackDescriptor:
        """Scan and classify a project directory."""
        snapshot = self.scanner.scan(project_root)
        return self.detector.detect(snapshot.files, snapshot.manifests, snapshot.samples)

    def build_prompt(self, descriptor: StackDescriptor) -> str:
        return self.prompt_builder.build(descriptor)

    def generate(self, descriptor: StackDescriptor, fallback_only: bool = False) -> GenerationResult:
        """Produce the artifact set for a descriptor.

        Args:
            descriptor: Detected stack
            fallback_only: Use templates only, without a model call

        Returns:
            GenerationResult with artifacts, prompt and raw response

        Raises:
            ConfigurationError: No usable provider configuration
            ProviderError: The model call failed
        """
        if fallback_only:
            return GenerationResult(
                descriptor=descriptor,
                artifacts=self.fallback.generate_artifact_set(descriptor),
            )
        prompt = self.build_prompt(descriptor)
        raw = self.invoker.invoke(prompt)
        return GenerationResult(
            descriptor=descriptor,
            artifacts=self.parser.parse(raw, descriptor),
            prompt=prompt,
            raw_response=raw,
        )

    def create_writer(
        self,
        project_root: Path,
        confirm_overwrite: Optional[Callable[[List[str]], str]] = None,
    ) -> ArtifactWriter:
        return ArtifactWriter(
            output_dir=self.config.get_output_path(project_root),
            overwrite=self.config.overwrite_files,
            backup=self.config.backup_existing,
            confirm_overwrite=confirm_overwrite,
        )

    def run(
        self,
        project_root: Path,
        session: SessionState,
        preview: Optional[PreviewGate] = None,
        writer: Optional[ArtifactWriter] = None,
        fallback_only: bool = False,
        descriptor: Optional[StackDescriptor] = None,
    ) -> GenerationResult:
        """Execute a complete run: detect, generate, preview, write.

        Args:
            project_root: Project directory
            session: Session state (logger, welcome flag)
            preview: Gate asked before writing; None writes directly
            writer: Artifact writer; built from config when omitted
            fallback_only: Skip the model call and use templates
            descriptor: Stack already detected for this root, to skip a rescan

        Returns:
            GenerationResult; accepted is False when the preview rejected the set
        """
        log = session.logger
        project_root = Path(project_root)

        if descriptor is None:
            descriptor = self.analyze(project_root)
        log.info("Detected %s", descriptor.description)

        result = self.generate(descriptor, fallback_only=fallback_only)
        if result.artifacts.used_fallback:
            log.info("Template fallback used for %d slot(s)", sum(
                1 for source in result.artifacts.sources.values() if source == ArtifactSource.FALLBACK
            ))

        if preview is not None and not preview.confirm(result.artifacts):
            log.info("Preview rejected; nothing written")
            result.accepted = False
            return result

        writer = writer or self.create_writer(project_root)
        result.report = writer.write(result.artifacts.to_files())
        log.info("Wrote %d file(s), skipped %d", len(result.report.written), len(result.report.skipped))
        return result
