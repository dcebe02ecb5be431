#!/usr/bin/env python3
"""Auto Docker CLI - generate Docker deployment files for a project.

Usage:
    # Analyze the current directory and generate files with the configured provider
    python main.py

    # Pick a provider and the structured JSON chain
    python main.py ./my-app --provider gemini --mode chain

    # Inspect detection without calling a model
    python main.py ./my-app --detect-only

    # Templates only, no API key needed
    python main.py ./my-app --fallback-only --direct
"""

import sys
from pathlib import Path
from typing import List, Optional

try:
    import click
    from rich.console import Console
    from rich.markup import escape
    from rich.panel import Panel
    from rich.table import Table
except ImportError:
    print("Missing dependencies. Run: pip install click rich")
    sys.exit(1)

from config import settings
from contracts import StackDescriptor
from errors import ConfigurationError, ProviderError
from logging_setup import configure_logging
from pipeline import (
    CANCEL,
    OVERWRITE_ALL,
    SKIP_EXISTING,
    ConsolePreview,
    GenerationPipeline,
    SessionState,
)
from providers import list_providers as get_available_providers


console = Console()


def print_descriptor(descriptor: StackDescriptor) -> None:
    """Render the detected stack as a table."""
    table = Table(title="Detected Stack", show_header=False, border_style="blue")
    table.add_column("Field", style="dim")
    table.add_column("Value")
    frontend = descriptor.frontend
    backend = descriptor.backend
    table.add_row("Category", descriptor.project_category.value)
    table.add_row(
        "Frontend",
        f"{frontend.framework.value} (port {frontend.port}, output {frontend.build_output_dir})" if frontend else "none",
    )
    table.add_row("Backend", f"{backend.framework.value} (port {backend.port})" if backend else "none")
    table.add_row("Database", descriptor.database.value)
    table.add_row("Ecosystems", ", ".join(e.value for e in descriptor.ecosystems) or "none")
    table.add_row("Multi-stage", "yes" if descriptor.has_multi_stage else "no")
    table.add_row("Existing Docker files", "yes" if descriptor.has_existing_container_files else "no")
    if descriptor.has_env_file:
        table.add_row(".env variables", ", ".join(descriptor.env_var_names[:10]) or "(none)")
    table.add_row("Sampled files", str(len(descriptor.sampled_files)))
    if descriptor.structural_only:
        table.add_row("Note", "classified from file layout only")
    console.print(table)


def ask_overwrite(existing: List[str]) -> str:
    """Ask what to do with files that already exist."""
    console.print(f"\n[yellow]Existing files:[/yellow] {', '.join(existing)}")
    return click.prompt(
        "Overwrite all, skip existing, or cancel?",
        type=click.Choice([OVERWRITE_ALL, SKIP_EXISTING, CANCEL]),
        default=SKIP_EXISTING,
    )


@click.command()
@click.argument(
    "project_dir",
    required=False,
    default=".",
    type=click.Path(file_okay=False),
)
@click.option(
    "--provider", "-p",
    type=click.Choice(["openai", "gemini", "anthropic"]),
    default=None,
    help=f"LLM provider (default: {settings.api_provider}; anthropic requires --mode chain)"
)
@click.option(
    "--model",
    default=None,
    help="Model name (e.g., gpt-4o, gemini-2.5-pro, claude-sonnet)"
)
@click.option(
    "--mode", "-m",
    type=click.Choice(["simple", "chain"]),
    default=None,
    help="simple = one call, fenced code blocks; chain = JSON output with retries"
)
@click.option(
    "--output", "-o", "output_path",
    default=None,
    help="Output directory relative to the project (default: project root)"
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Overwrite existing Docker files without asking"
)
@click.option(
    "--no-nginx",
    is_flag=True,
    help="Do not generate nginx.conf for frontend projects"
)
@click.option(
    "--direct",
    is_flag=True,
    help="Write files without the preview step"
)
@click.option(
    "--backup",
    is_flag=True,
    help="Back up existing files to .docker-backup before overwriting"
)
@click.option(
    "--detect-only",
    is_flag=True,
    help="Only detect the stack, don't generate files"
)
@click.option(
    "--show-prompt",
    is_flag=True,
    help="Print the generation prompt and exit (no model call)"
)
@click.option(
    "--fallback-only",
    is_flag=True,
    help="Generate from built-in templates without calling a model"
)
@click.option(
    "--list-providers",
    is_flag=True,
    help="List providers and whether an API key is configured, then exit"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Verbose output"
)
def main(
    project_dir: str,
    provider: Optional[str],
    model: Optional[str],
    mode: Optional[str],
    output_path: Optional[str],
    overwrite: bool,
    no_nginx: bool,
    direct: bool,
    backup: bool,
    detect_only: bool,
    show_prompt: bool,
    fallback_only: bool,
    list_providers: bool,
    verbose: bool,
):
    """Auto Docker: generate Dockerfile, docker-compose.yml, .dockerignore and nginx.conf.

    Detects the project's stack from its manifests and file layout, asks the
    configured LLM provider for production-ready files, and falls back to
    built-in templates for anything the model gets wrong.
    """
    # Handle --list-providers
    if list_providers:
        console.print("[bold]Available LLM Providers:[/bold]\n")
        providers_status = get_available_providers(settings)
        for name, available in providers_status.items():
            status = "[green]✓ Ready[/green]" if available else "[red]✗ No API key[/red]"
            console.print(f"  {name:12} {status}")
        console.print("\n[dim]Set API keys via environment variables or .env:[/dim]")
        console.print("  AUTO_DOCKER_OPENAI_API_KEY, AUTO_DOCKER_GEMINI_API_KEY, AUTO_DOCKER_ANTHROPIC_API_KEY")
        console.print("[dim]anthropic is available with --mode chain only.[/dim]")
        return

    # Per-run overrides of the global settings
    overrides = {}
    if provider:
        overrides["api_provider"] = provider
    if model:
        overrides["model"] = model
    if mode:
        overrides["generation_mode"] = mode
    if output_path is not None:
        overrides["docker_output_path"] = output_path
    if overwrite:
        overrides["overwrite_files"] = True
    if no_nginx:
        overrides["include_nginx"] = False
    if backup:
        overrides["backup_existing"] = True
    run_settings = settings.model_copy(update=overrides)

    session = SessionState(logger=configure_logging(verbose))
    if session.consume_welcome():
        console.print(Panel.fit(
            "[bold blue]Auto Docker[/bold blue]\n"
            "[dim]Docker configuration generator[/dim]",
            border_style="blue"
        ))

    project_root = Path(project_dir).resolve()
    pipeline = GenerationPipeline(config=run_settings)

    try:
        descriptor = pipeline.analyze(project_root)
    except NotADirectoryError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if detect_only:
        print_descriptor(descriptor)
        return

    if show_prompt:
        console.print(pipeline.build_prompt(descriptor), markup=False, highlight=False)
        return

    console.print(f"\n[dim]Project:[/dim] {project_root}")
    console.print(f"[dim]Detected:[/dim] {escape(descriptor.description.split('. Key files')[0])}")
    if fallback_only:
        console.print("[dim]Source:[/dim] built-in templates")
    else:
        console.print(
            f"[dim]Provider:[/dim] {run_settings.api_provider} "
            f"({run_settings.generation_mode} mode)"
        )
        if run_settings.model:
            console.print(f"[dim]Model:[/dim] {run_settings.model}")

    preview = None if direct else ConsolePreview(console=console, timeout=run_settings.preview_timeout_seconds)
    writer = pipeline.create_writer(project_root, confirm_overwrite=ask_overwrite)

    if not fallback_only:
        console.print("\n[bold]Generating Docker configuration...[/bold]")
    try:
        result = pipeline.run(
            project_root,
            session,
            preview=preview,
            writer=writer,
            fallback_only=fallback_only,
            descriptor=descriptor,
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        if e.remediation:
            console.print(f"[dim]{escape(e.remediation)}[/dim]")
        sys.exit(1)
    except ProviderError as e:
        console.print(f"[red]Generation failed:[/red] {escape(str(e))}")
        console.print("[dim]Re-run to try again, or use --fallback-only to generate from templates.[/dim]")
        sys.exit(1)

    if not result.accepted:
        console.print("[yellow]Cancelled. No files were written.[/yellow]")
        return

    report = result.report
    if report.cancelled:
        console.print("[yellow]Cancelled. Existing files were left untouched.[/yellow]")
        return

    console.print("\n" + "=" * 60)
    if report.written:
        console.print(f"[green]Created:[/green] {', '.join(result.written_files)}")
    if report.skipped:
        console.print(f"[yellow]Skipped existing:[/yellow] {', '.join(report.skipped)}")
    for backup_path in report.backups:
        console.print(f"[dim]Backup:[/dim] {backup_path}")
    for warning in result.artifacts.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
    for error in report.failed:
        console.print(f"[red]Error:[/red] {escape(str(error))}")
    console.print(f"\n[bold]Output directory:[/bold] {writer.output_dir}")
    console.print("=" * 60)

    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
