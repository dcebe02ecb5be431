"""Human-in-the-loop preview before write-back.

The gate answers one question: write these files or not. No answer within
the timeout counts as reject.
"""

import logging
import threading
from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.syntax import Syntax

from contracts import ArtifactSet, ArtifactSource

logger = logging.getLogger(__name__)

LEXERS = {
    "Dockerfile": "docker",
    "docker-compose.yml": "yaml",
    "nginx.conf": "nginx",
    ".dockerignore": "text",
    "README-Docker.md": "markdown",
}

PROMPT_THREAD_NAME = "auto-docker-preview"


class PreviewGate(Protocol):
    def confirm(self, artifacts: ArtifactSet) -> bool:
        ...


class ConsolePreview:
    """Renders the artifact set to a rich console and asks for confirmation."""

    def __init__(
        self,
        console: Optional[Console] = None,
        timeout: float = 300.0,
        ask: Optional[Callable[[], bool]] = None,
    ):
        """Initialize the preview.

        Args:
            console: Console to render into
            timeout: Seconds to wait for an answer before rejecting
            ask: Answer source; defaults to a rich Confirm prompt
        """
        self.console = console or Console()
        self.timeout = timeout
        self.ask = ask or self._ask_console

    def render(self, artifacts: ArtifactSet) -> None:
        for file_name, content in artifacts.to_files().items():
            self.console.print(Panel(
                Syntax(content, LEXERS.get(file_name, "text"), line_numbers=False),
                title=file_name,
                border_style="cyan",
            ))
        for warning in artifacts.warnings:
            self.console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
        if artifacts.used_fallback:
            fallback_slots = ", ".join(
                slot.value for slot, source in artifacts.sources.items() if source == ArtifactSource.FALLBACK
            )
            self.console.print(f"[dim]Template fallback used for: {fallback_slots}[/dim]")

    def confirm(self, artifacts: ArtifactSet) -> bool:
        """Render the artifacts and return True only on an explicit yes.

        A timeout returns False right away, but the prompt thread stays
        blocked on stdin until the user answers or the process exits. It is a
        daemon thread, so it never keeps the interpreter alive.
        """
        self.render(artifacts)
        answer = self._wait_for_answer()
        if answer is None:
            self.console.print(f"[yellow]No answer after {self.timeout:.0f}s; nothing written.[/yellow]")
            return False
        return answer

    def _wait_for_answer(self) -> Optional[bool]:
        """Run the prompt in a daemon thread; None when the timeout elapses first."""
        result = {}

        def worker():
            try:
                result["answer"] = bool(self.ask())
            except (EOFError, KeyboardInterrupt):
                result["answer"] = False

        thread = threading.Thread(target=worker, name=PROMPT_THREAD_NAME, daemon=True)
        thread.start()
        thread.join(self.timeout)
        if thread.is_alive():
            logger.debug("Preview timed out after %.0fs", self.timeout)
            return None
        return result.get("answer", False)

    def _ask_console(self) -> bool:
        return Confirm.ask("Create these files?", console=self.console, default=False)
