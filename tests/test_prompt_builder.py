"""Tests for the PromptBuilder and routing-rule catalog."""

import pytest

from contracts import (
    BackendFramework,
    BackendInfo,
    DatabaseType,
    FrontendFramework,
    FrontendInfo,
    SampledFile,
    StackDescriptor,
)
from prompts import BASELINE_RULES, ROUTING_RULES, PromptBuilder, SYSTEM_PROMPT, TRUNCATION_MARKER


@pytest.fixture
def vite_frontend():
    return FrontendInfo(framework=FrontendFramework.VITE_REACT, port=3000, build_output_dir="dist")


@pytest.fixture
def flask_backend():
    return BackendInfo(framework=BackendFramework.FLASK, port=5000)


class TestRoutingRules:
    """Test the routing-rule catalog."""

    def test_every_block_ends_with_baseline(self):
        for key, block in ROUTING_RULES.items():
            assert block.endswith(BASELINE_RULES), key

    def test_catalog_keys(self):
        assert set(ROUTING_RULES) == {"fullstack", "frontend-only", "backend-only", "api-only"}


class TestPromptBuilder:
    """Test prompt construction."""

    def test_build_is_deterministic(self, vite_frontend):
        descriptor = StackDescriptor(frontend=vite_frontend, files=["package.json"])
        builder = PromptBuilder()
        assert builder.build(descriptor) == builder.build(descriptor)

    def test_routing_block_selected_by_category(self, vite_frontend, flask_backend):
        builder = PromptBuilder()
        fullstack = builder.build(StackDescriptor(frontend=vite_frontend, backend=flask_backend))
        frontend_only = builder.build(StackDescriptor(frontend=vite_frontend))
        assert "Fullstack Routing" in fullstack
        assert "/api/* -> Backend API proxy (port 5000)" in fullstack
        assert "Frontend-Only Routing" in frontend_only

    def test_custom_catalog(self, vite_frontend):
        catalog = {"frontend-only": "CUSTOM {frontend_port}", "api-only": "FALLBACK"}
        prompt = PromptBuilder().build(StackDescriptor(frontend=vite_frontend), catalog)
        assert "CUSTOM 3000" in prompt

    def test_backend_only_routing_without_proxy_file(self, flask_backend):
        prompt = PromptBuilder().build(StackDescriptor(backend=flask_backend))
        assert "## ROUTING & HARDENING:" in prompt
        assert "Backend-Only Routing" in prompt
        assert "Root (/) -> Direct API routing (port 5000)" in prompt
        assert BASELINE_RULES in prompt
        assert "```nginx" not in prompt
        assert "nginx.conf" not in prompt

    def test_static_project_routes_as_api_only(self):
        prompt = PromptBuilder().build(StackDescriptor(files=["index.html"]))
        assert "API-Only Routing" in prompt
        assert BASELINE_RULES in prompt

    def test_no_proxy_section_when_disabled(self, vite_frontend):
        prompt = PromptBuilder(include_proxy=False).build(StackDescriptor(frontend=vite_frontend))
        assert "```nginx" not in prompt

    def test_env_warning_lists_names_only(self):
        names = [f"VAR_{i}" for i in range(15)]
        descriptor = StackDescriptor(has_env_file=True, env_var_names=names, files=[".env"])
        prompt = PromptBuilder().build(descriptor)
        assert "env_file: .env" in prompt
        assert "VAR_9" in prompt
        assert "VAR_10" not in prompt

    def test_bundler_output_dir_warning(self, vite_frontend):
        prompt = PromptBuilder().build(StackDescriptor(frontend=vite_frontend))
        assert "dist/ NOT build/" in prompt

    def test_cra_has_no_bundler_warning(self):
        frontend = FrontendInfo(framework=FrontendFramework.REACT, port=3000, build_output_dir="build")
        prompt = PromptBuilder().build(StackDescriptor(frontend=frontend))
        assert "NOT build/" not in prompt

    @pytest.mark.parametrize("framework,server", [
        (BackendFramework.FLASK, "gunicorn"),
        (BackendFramework.DJANGO, "gunicorn"),
        (BackendFramework.FASTAPI, "uvicorn"),
    ])
    def test_python_production_server_warning(self, framework, server):
        descriptor = StackDescriptor(backend=BackendInfo(framework=framework, port=8000))
        warnings = PromptBuilder().warnings_for(descriptor)
        assert any(server in w for w in warnings)

    @pytest.mark.parametrize("framework,server", [
        (BackendFramework.FLASK, "gunicorn"),
        (BackendFramework.DJANGO, "gunicorn"),
        (BackendFramework.FASTAPI, "uvicorn"),
    ])
    def test_declared_production_server_skips_warning(self, framework, server):
        descriptor = StackDescriptor(
            backend=BackendInfo(framework=framework, port=8000),
            dependency_names=[framework.value, server],
        )
        builder = PromptBuilder()
        assert not any(server in w for w in builder.warnings_for(descriptor))
        assert "install the production server" not in builder.build(descriptor)

    def test_other_server_does_not_count_as_declared(self):
        descriptor = StackDescriptor(
            backend=BackendInfo(framework=BackendFramework.FASTAPI, port=8000),
            dependency_names=["fastapi", "gunicorn"],
        )
        prompt = PromptBuilder().build(descriptor)
        assert "FastAPI app - MUST install uvicorn" in prompt
        assert "install the production server" in prompt

    def test_sampled_files_truncation_marker(self):
        descriptor = StackDescriptor(sampled_files=[
            SampledFile(path="big.js", content="a" * 1000, truncated=True),
            SampledFile(path="small.js", content="b"),
        ])
        prompt = PromptBuilder().build(descriptor)
        assert "**big.js**" in prompt
        assert prompt.count(TRUNCATION_MARKER) == 1

    def test_content_over_budget_is_cut(self):
        descriptor = StackDescriptor(sampled_files=[SampledFile(path="x.py", content="z" * 50)])
        prompt = PromptBuilder(max_file_chars=20).build(descriptor)
        assert "z" * 21 not in prompt
        assert TRUNCATION_MARKER in prompt

    def test_fenced_contract(self, vite_frontend):
        prompt = PromptBuilder(output_contract="fenced").build(StackDescriptor(frontend=vite_frontend))
        assert "```dockerfile" in prompt
        assert "```yaml" in prompt
        assert "```nginx" in prompt

    def test_json_contract(self, vite_frontend):
        prompt = PromptBuilder(output_contract="json").build(StackDescriptor(frontend=vite_frontend))
        assert "dockerfile, docker_compose, nginx_conf, dockerignore, notes" in prompt
        assert "```dockerfile" not in prompt

    def test_database_requirement(self, flask_backend):
        prompt = PromptBuilder().build(StackDescriptor(backend=flask_backend, database=DatabaseType.MYSQL))
        assert "Include a mysql service" in prompt

    def test_unknown_contract_rejected(self):
        with pytest.raises(ValueError):
            PromptBuilder(output_contract="xml")

    def test_system_prompt(self):
        assert "DevOps" in SYSTEM_PROMPT
