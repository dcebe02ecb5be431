"""Run orchestration: session state, preview gate and write-back."""

from .artifact_writer import ArtifactWriter, WriteReport, OVERWRITE_ALL, SKIP_EXISTING, CANCEL
from .preview import ConsolePreview, PreviewGate
from .generation_pipeline import GenerationPipeline, GenerationResult, SessionState

__all__ = [
    "ArtifactWriter",
    "WriteReport",
    "OVERWRITE_ALL",
    "SKIP_EXISTING",
    "CANCEL",
    "ConsolePreview",
    "PreviewGate",
    "GenerationPipeline",
    "GenerationResult",
    "SessionState",
]
