"""Configuration settings for Auto Docker."""

# Load .env into os.environ so the standard provider variables are visible
from dotenv import load_dotenv

load_dotenv()

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global settings for Auto Docker.

    Settings can be overridden via environment variables with AUTO_DOCKER_ prefix.
    Example: AUTO_DOCKER_API_PROVIDER=gemini
    """

    # Provider selection
    api_provider: Literal["openai", "gemini", "anthropic"] = Field(
        default="openai",
        description="Active LLM provider (exactly one per configuration)"
    )
    model: str = Field(
        default="",
        description="Model identifier; empty means the provider's default model"
    )
    generation_mode: Literal["simple", "chain"] = Field(
        default="simple",
        description="simple = direct call with fenced-block output; chain = JSON output with retries"
    )

    # Credentials (env: AUTO_DOCKER_<KEY>)
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key (env: AUTO_DOCKER_OPENAI_API_KEY)",
    )
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key (env: AUTO_DOCKER_GEMINI_API_KEY)",
    )
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key, chain mode only (env: AUTO_DOCKER_ANTHROPIC_API_KEY)",
    )

    # Sampling bounds; None means the mode default (see effective_temperature)
    temperature: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (default 0.3 simple, 0.1 chain)"
    )
    max_tokens: Optional[int] = Field(
        default=None,
        gt=0,
        description="Maximum response tokens (default 4000 simple, 8192 chain)"
    )

    # Chain-mode retry policy
    chain_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per structured-chain generation"
    )
    chain_retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay; attempt N waits N times this value"
    )

    # Output
    docker_output_path: str = Field(
        default="",
        description="Output directory relative to the project root; empty means the root"
    )
    overwrite_files: bool = Field(
        default=False,
        description="Overwrite existing Docker files without asking"
    )
    include_nginx: bool = Field(
        default=True,
        description="Generate nginx.conf for projects with a frontend"
    )
    backup_existing: bool = Field(
        default=False,
        description="Copy existing Docker files to .docker-backup before writing"
    )
    preview_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Preview confirmation timeout; expiry counts as reject"
    )

    # Workspace scanning
    max_listed_files: int = Field(
        default=100,
        description="Maximum files collected per scan pattern"
    )
    max_sampled_files: int = Field(
        default=50,
        description="Maximum files whose contents are sampled into the prompt"
    )
    max_file_chars: int = Field(
        default=1000,
        description="Per-file character budget for sampled contents"
    )

    model_config = {
        "env_prefix": "AUTO_DOCKER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def output_contract(self) -> str:
        """Output contract requested from the model: 'json' in chain mode, 'fenced' otherwise."""
        return "json" if self.generation_mode == "chain" else "fenced"

    @property
    def effective_temperature(self) -> float:
        if self.temperature is not None:
            return self.temperature
        return 0.1 if self.generation_mode == "chain" else 0.3

    @property
    def effective_max_tokens(self) -> int:
        if self.max_tokens is not None:
            return self.max_tokens
        return 8192 if self.generation_mode == "chain" else 4000

    def api_key_for(self, provider: str) -> str:
        """Return the configured credential for a provider (may be empty)."""
        return {
            "openai": self.openai_api_key,
            "gemini": self.gemini_api_key,
            "anthropic": self.anthropic_api_key,
        }.get(provider, "").strip()

    def get_output_path(self, project_root: Path) -> Path:
        """Resolve the artifact output directory for a project."""
        if self.docker_output_path:
            return Path(project_root) / self.docker_output_path
        return Path(project_root)


# Patterns used when listing project files (relative glob suffixes)
SCAN_PATTERNS: List[str] = [
    "*.json",
    "*.js",
    "*.ts",
    "*.py",
    "*.md",
    "*.yml",
    "*.yaml",
    "*.txt",
    "*.lock",
    "*.xml",
    "*.mod",
    "Gemfile",
    "Dockerfile*",
    "docker-compose*",
    ".env",
]

# Directories never descended into during a scan
EXCLUDED_DIRS: List[str] = [
    "node_modules",
    ".git",
    ".venv",
    "venv",
    "__pycache__",
    ".next",
    ".nuxt",
    "dist",
    "build",
    "target",
    ".idea",
    ".vscode",
    ".docker-backup",
]


# Create singleton instance
settings = Settings()
