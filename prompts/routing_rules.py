"""Reverse-proxy routing guidance, one block per project category.

Each block ends with the shared baseline. Port placeholders are filled by
PromptBuilder with str.format.
"""

from typing import Dict

BASELINE_RULES = """- **Upstream Blocks**: Health checks and load balancing
- **Security Headers**: X-Frame-Options, HSTS, CSP, X-Content-Type-Options
- **Gzip Compression**: Static assets and API responses
- **SSL Ready**: Certificate configuration blocks
- **Rate Limiting**: API endpoint protection"""

FULLSTACK_RULES = """**Fullstack Routing**:
- Root (/) -> Frontend static files (port {frontend_port})
- /api/* -> Backend API proxy (port {backend_port})
- SPA routing with try_files for client-side routes
- Frontend build optimization with cache headers"""

FRONTEND_ONLY_RULES = """**Frontend-Only Routing**:
- Root (/) -> Frontend static files (port {frontend_port})
- SPA routing with try_files
- /api/* -> Placeholder for future backend integration
- Static asset caching and compression"""

BACKEND_ONLY_RULES = """**Backend-Only Routing**:
- Root (/) -> Direct API routing (port {backend_port})
- CORS headers for cross-origin requests
- API versioning support (/v1/, /v2/)
- Health check endpoints (/health, /metrics)"""

API_ONLY_RULES = """**API-Only Routing**:
- All routes -> API service (port {backend_port})
- RESTful routing with proper HTTP methods
- API documentation endpoint (/docs, /swagger)
- Monitoring and health checks"""


def _with_baseline(rules: str) -> str:
    return f"{rules}\n{BASELINE_RULES}"


ROUTING_RULES: Dict[str, str] = {
    "fullstack": _with_baseline(FULLSTACK_RULES),
    "frontend-only": _with_baseline(FRONTEND_ONLY_RULES),
    "backend-only": _with_baseline(BACKEND_ONLY_RULES),
    "api-only": _with_baseline(API_ONLY_RULES),
}

DEFAULT_ROUTING_KEY = "api-only"


def select_routing_rules(catalog: Dict[str, str], key: str) -> str:
    """Return the catalog block for key, or the api-only block."""
    return catalog.get(key) or catalog[DEFAULT_ROUTING_KEY]
