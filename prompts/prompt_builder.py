"""Prompt builder: StackDescriptor to a single generation instruction.

The output is a pure function of the descriptor, the routing-rule catalog and
the builder's options. Env var values never reach this module; only names do.
"""

from typing import Dict, List

from contracts import (
    BUNDLER_FRAMEWORKS,
    BackendFramework,
    JSON_CONTRACT_KEYS,
    META_FRAMEWORKS,
    NODE_BACKENDS,
    StackDescriptor,
)
from prompts.routing_rules import ROUTING_RULES, select_routing_rules

SYSTEM_PROMPT = """You are Auto Docker, an expert DevOps engineer specializing in Docker containerization.
Generate production-ready Docker configuration files based on the project analysis you are given.
Follow the requested output format exactly and never include secret values."""

TRUNCATION_MARKER = "...(truncated)"
MAX_ENV_NAMES = 10
MAX_PROMPT_FILES = 10
MAX_PROMPT_DEPS = 20

# Production server each Python framework needs; skipped when a manifest declares it
PYTHON_SERVER_WARNINGS: Dict[BackendFramework, str] = {
    BackendFramework.FLASK: (
        "Flask app - MUST install gunicorn and use "
        'CMD ["gunicorn", "--bind", "0.0.0.0:{port}", "app:app"]'
    ),
    BackendFramework.DJANGO: (
        "Django app - MUST install gunicorn, run collectstatic, and use "
        'CMD ["gunicorn", "--bind", "0.0.0.0:{port}", "wsgi:application"]'
    ),
    BackendFramework.FASTAPI: (
        "FastAPI app - MUST install uvicorn and use "
        'CMD ["uvicorn", "main:app", "--host", "0.0.0.0", "--port", "{port}"]'
    ),
}

FENCED_FORMAT = """FORMAT (NO extra text, only code blocks, in this order):

```dockerfile
# Dockerfile here
```

```yaml
# docker-compose.yml here
```

```
# .dockerignore here
```
{nginx_block}"""

FENCED_NGINX_BLOCK = """
```nginx
# nginx.conf here
```
"""

JSON_FORMAT = (
    "Return your response as a single JSON object with exactly these keys: {keys}. "
    "Each value is the complete file content as a string ({proxy_note}). "
    "Do not wrap the object in prose."
)


class PromptBuilder:
    """Builds the generation prompt for one StackDescriptor."""

    def __init__(
        self,
        output_contract: str = "fenced",
        include_proxy: bool = True,
        max_file_chars: int = 1000,
    ):
        """Initialize the builder.

        Args:
            output_contract: "fenced" for code blocks, "json" for a single object
            include_proxy: Ask for nginx.conf when the project has a frontend
            max_file_chars: Per-file character budget for sampled contents
        """
        if output_contract not in ("fenced", "json"):
            raise ValueError(f"Unknown output contract: {output_contract}")
        self.output_contract = output_contract
        self.include_proxy = include_proxy
        self.max_file_chars = max_file_chars

    def build(self, descriptor: StackDescriptor, catalog: Dict[str, str] = ROUTING_RULES) -> str:
        """Build the prompt text.

        Args:
            descriptor: Detected stack
            catalog: Routing-rule blocks keyed by category

        Returns:
            The complete user prompt
        """
        wants_proxy = self.include_proxy and descriptor.frontend is not None
        sections = [
            "Generate COMPACT, production-ready Docker files for this project.",
            self._project_section(descriptor),
        ]

        warnings = self.warnings_for(descriptor)
        if warnings:
            sections.append("\n".join(f"WARNING: {w}" for w in warnings))

        if descriptor.sampled_files:
            sections.append("## INCLUDED PROJECT FILES:\n\n" + self._files_section(descriptor))

        sections.append(self._requirements_section(descriptor, wants_proxy))
        sections.append("## ROUTING & HARDENING:\n" + self._routing_section(descriptor, catalog))
        sections.append(self._format_section(wants_proxy))
        return "\n\n".join(sections) + "\n"

    def warnings_for(self, descriptor: StackDescriptor) -> List[str]:
        """High-salience warnings for known risk conditions."""
        warnings: List[str] = []
        if descriptor.has_env_file:
            names = ", ".join(descriptor.env_var_names[:MAX_ENV_NAMES]) or "none listed"
            warnings.append(
                f".env file detected with variables: {names}. "
                "Reference it with env_file: .env and NEVER inline its values."
            )
        frontend = descriptor.frontend
        if frontend and frontend.framework in BUNDLER_FRAMEWORKS and frontend.build_output_dir != "build":
            warnings.append(
                f"CRITICAL: This is a Vite project - build output goes to "
                f"{frontend.build_output_dir}/ NOT build/"
            )
        backend = descriptor.backend
        if backend and backend.framework in PYTHON_SERVER_WARNINGS and not descriptor.declares_production_server:
            warnings.append("CRITICAL: " + PYTHON_SERVER_WARNINGS[backend.framework].format(port=backend.port))
        return warnings

    def _project_section(self, descriptor: StackDescriptor) -> str:
        category = descriptor.project_category.value
        frontend = descriptor.frontend
        backend = descriptor.backend
        lines = [
            f"PROJECT: {category}",
            f"FRONTEND: {frontend.framework.value} (port {frontend.port}, build output {frontend.build_output_dir})"
            if frontend else "FRONTEND: none",
            f"BACKEND: {backend.framework.value} (port {backend.port})" if backend else "BACKEND: none",
            f"DATABASE: {descriptor.database.value}",
            f"EXISTING DOCKER FILES: {'yes' if descriptor.has_existing_container_files else 'no'}",
        ]
        if descriptor.files:
            lines.append(f"FILES: {', '.join(descriptor.files[:MAX_PROMPT_FILES])}")
        if descriptor.dependency_names:
            lines.append(f"DEPS: {', '.join(descriptor.dependency_names[:MAX_PROMPT_DEPS])}")
        if descriptor.structural_only:
            lines.append("NOTE: No dependency manifest identified the stack; classification is from the file layout.")
        return "\n".join(lines)

    def _files_section(self, descriptor: StackDescriptor) -> str:
        blocks = []
        for sampled in descriptor.sampled_files:
            content = sampled.content[: self.max_file_chars]
            if sampled.truncated or len(sampled.content) > self.max_file_chars:
                content += f"\n{TRUNCATION_MARKER}"
            blocks.append(f"**{sampled.path}**:\n```\n{content}\n```")
        return "\n\n".join(blocks)

    def _requirements_section(self, descriptor: StackDescriptor, wants_proxy: bool) -> str:
        files = "Dockerfile, docker-compose.yml, .dockerignore"
        if wants_proxy:
            files += ", nginx.conf"
        stage = "multi-stage" if descriptor.has_multi_stage else "single-stage"
        lines = [
            f"Generate a {stage} Dockerfile and {files}.",
            "",
            "REQUIREMENTS:",
            "- COMPACT files, no comments except essential ones",
            "- Use alpine/slim images for smaller size",
            "- Run as a non-root user where the base image allows it",
            "- Only necessary ports and volumes",
            "- Essential environment variables only",
        ]
        if descriptor.has_database:
            lines.append(
                f"- Include a {descriptor.database.value} service with a named volume "
                "and make the app service depend on it"
            )
        else:
            lines.append("- No database needed")
        frontend = descriptor.frontend
        if frontend and frontend.framework in BUNDLER_FRAMEWORKS:
            lines.append(f"- MUST copy the build from {frontend.build_output_dir}/")
        if descriptor.has_env_file:
            lines.append("- Add env_file: .env in docker-compose.yml for the app service")
        if descriptor.production_server and not descriptor.declares_production_server:
            lines.append("- For Python: install the production server (gunicorn/uvicorn) separately in the Dockerfile")
        if wants_proxy:
            port = self._upstream_port(descriptor)
            lines.append(
                f"- For Frontend: app exposes port {port}, nginx service on port 80 "
                f"with reverse proxy to http://app:{port}"
            )
            lines.append(f"- nginx.conf must include: proxy_pass http://app:{port}; with proper headers")
        return "\n".join(lines)

    @staticmethod
    def _routing_section(descriptor: StackDescriptor, catalog: Dict[str, str]) -> str:
        frontend_port = descriptor.frontend.port if descriptor.frontend else descriptor.app_port
        backend_port = descriptor.backend.port if descriptor.backend else descriptor.app_port
        rules = select_routing_rules(catalog, descriptor.routing_key)
        return rules.format(frontend_port=frontend_port, backend_port=backend_port)

    def _format_section(self, wants_proxy: bool) -> str:
        if self.output_contract == "json":
            proxy_note = "nginx_conf may be an empty string" if not wants_proxy else "nginx_conf is required"
            return "## OUTPUT FORMAT:\n" + JSON_FORMAT.format(
                keys=", ".join(JSON_CONTRACT_KEYS),
                proxy_note=proxy_note,
            )
        return FENCED_FORMAT.format(nginx_block=FENCED_NGINX_BLOCK if wants_proxy else "")

    @staticmethod
    def _upstream_port(descriptor: StackDescriptor) -> int:
        # Only a node backend can serve the built frontend from the same container
        frontend = descriptor.frontend
        if frontend.framework in META_FRAMEWORKS or descriptor.backend is None:
            return frontend.port
        if descriptor.backend.framework in NODE_BACKENDS:
            return descriptor.backend.port
        return frontend.port
