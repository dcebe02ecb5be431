"""Heuristic stack detector.

Turns a project's file listing and manifest contents into a StackDescriptor.
Manifests are additive evidence; each ecosystem is matched against a
priority-ordered table and the first hit wins. When no manifest classifies the
project, the file layout is used instead.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from contracts import (
    BackendFramework,
    BackendInfo,
    DatabaseType,
    Ecosystem,
    FrontendFramework,
    FrontendInfo,
    SampledFile,
    StackDescriptor,
)
from detector.manifests import ENV_FILE, ManifestEvidence, read_env_var_names, read_manifests

logger = logging.getLogger(__name__)

# Frontend rules for package.json, highest priority first. A rule matches when
# all of its dependencies are present.
FRONTEND_RULES: List[Tuple[FrontendFramework, Tuple[str, ...]]] = [
    (FrontendFramework.NEXTJS, ("next",)),
    (FrontendFramework.NUXT, ("nuxt",)),
    (FrontendFramework.VITE_REACT, ("vite", "react")),
    (FrontendFramework.VITE_VUE, ("vite", "vue")),
    (FrontendFramework.REACT, ("react",)),
    (FrontendFramework.REACT, ("@types/react",)),
    (FrontendFramework.VUE, ("vue",)),
    (FrontendFramework.VUE, ("@vue/cli",)),
    (FrontendFramework.ANGULAR, ("@angular/core",)),
    (FrontendFramework.SVELTE, ("svelte",)),
    (FrontendFramework.VITE, ("vite",)),
]

# Backend rules per ecosystem, highest priority first
BACKEND_RULES: Dict[Ecosystem, List[Tuple[BackendFramework, Tuple[str, ...]]]] = {
    Ecosystem.NODE: [
        (BackendFramework.NESTJS, ("@nestjs/core", "nestjs")),
        (BackendFramework.EXPRESS, ("express",)),
        (BackendFramework.FASTIFY, ("fastify",)),
        (BackendFramework.KOA, ("koa",)),
    ],
    Ecosystem.PYTHON: [
        (BackendFramework.DJANGO, ("django",)),
        (BackendFramework.FLASK, ("flask",)),
        (BackendFramework.FASTAPI, ("fastapi",)),
    ],
    Ecosystem.JAVA: [
        (BackendFramework.SPRING_BOOT, ("spring-boot-starter-web", "spring-boot-starter", "spring-boot-starter-parent")),
    ],
    Ecosystem.RUBY: [
        (BackendFramework.RAILS, ("rails",)),
        (BackendFramework.SINATRA, ("sinatra",)),
    ],
    Ecosystem.GO: [
        (BackendFramework.GIN, ("github.com/gin-gonic/gin",)),
        (BackendFramework.ECHO, ("github.com/labstack/echo", "github.com/labstack/echo/v4")),
        (BackendFramework.FIBER, ("github.com/gofiber/fiber", "github.com/gofiber/fiber/v2")),
    ],
}

# Evidence order for backends: compiled and server-side manifests outrank package.json
BACKEND_ECOSYSTEM_ORDER: List[Ecosystem] = [
    Ecosystem.GO,
    Ecosystem.JAVA,
    Ecosystem.RUBY,
    Ecosystem.PYTHON,
    Ecosystem.NODE,
]

# Driver / ORM names -> canonical database, highest priority first
DATABASE_RULES: List[Tuple[DatabaseType, Tuple[str, ...]]] = [
    (DatabaseType.MONGODB, (
        "mongoose", "mongodb", "pymongo", "motor", "mongoengine",
        "spring-boot-starter-data-mongodb", "mongodb-driver-sync", "mongoid",
        "go.mongodb.org/mongo-driver",
    )),
    (DatabaseType.POSTGRESQL, (
        "pg", "postgres", "postgresql", "psycopg2", "psycopg2-binary", "psycopg",
        "asyncpg", "github.com/lib/pq", "github.com/jackc/pgx/v5",
        "gorm.io/driver/postgres",
    )),
    (DatabaseType.MYSQL, (
        "mysql", "mysql2", "pymysql", "mysqlclient", "mysql-connector-python",
        "mysql-connector-java", "mysql-connector-j", "github.com/go-sql-driver/mysql",
        "gorm.io/driver/mysql",
    )),
]

# Build output directory per frontend framework. Every Dockerfile that copies
# the production build depends on this table being exact.
BUILD_OUTPUT_DIRS: Dict[FrontendFramework, str] = {
    FrontendFramework.NEXTJS: ".next",
    FrontendFramework.NUXT: ".output",
    FrontendFramework.VITE_REACT: "dist",
    FrontendFramework.VITE_VUE: "dist",
    FrontendFramework.VITE: "dist",
    FrontendFramework.REACT: "build",
    FrontendFramework.VUE: "dist",
    FrontendFramework.ANGULAR: "dist",
    FrontendFramework.SVELTE: "dist",
    FrontendFramework.STATIC_SITE: "dist",
}

FRONTEND_PORTS: Dict[FrontendFramework, int] = {
    FrontendFramework.NEXTJS: 3000,
    FrontendFramework.NUXT: 3000,
    FrontendFramework.VITE_REACT: 3000,
    FrontendFramework.VITE_VUE: 3000,
    FrontendFramework.VITE: 3000,
    FrontendFramework.REACT: 3000,
    FrontendFramework.VUE: 3000,
    FrontendFramework.ANGULAR: 4200,
    FrontendFramework.SVELTE: 3000,
    FrontendFramework.STATIC_SITE: 8080,
}

BACKEND_PORTS: Dict[BackendFramework, int] = {
    BackendFramework.EXPRESS: 3000,
    BackendFramework.FASTIFY: 3000,
    BackendFramework.NESTJS: 3000,
    BackendFramework.KOA: 3000,
    BackendFramework.DJANGO: 8000,
    BackendFramework.FLASK: 5000,
    BackendFramework.FASTAPI: 8000,
    BackendFramework.SPRING_BOOT: 8080,
    BackendFramework.RAILS: 3000,
    BackendFramework.SINATRA: 4567,
    BackendFramework.GIN: 8080,
    BackendFramework.ECHO: 8080,
    BackendFramework.FIBER: 8080,
    BackendFramework.GO: 8080,
    BackendFramework.GENERIC: 8080,
}

# Path segments suggesting server-side code when no manifest classifies the project
SERVER_PATH_HINTS = ("server", "api", "routes")

DOCKERFILE_PREFIX = "Dockerfile"
COMPOSE_PREFIXES = ("docker-compose", "compose.yml", "compose.yaml")

MAX_LISTED_FILES = 50
MAX_DEPENDENCY_NAMES = 40


def build_output_dir_for(framework: FrontendFramework) -> str:
    """Return the production build directory for a frontend framework."""
    return BUILD_OUTPUT_DIRS[framework]


class StackDetector:
    """Classifies a project's stack from its manifests and file layout.

    detect() is deterministic and never raises.
    """

    def __init__(self, max_sampled_files: int = 50, max_file_chars: int = 1000):
        """Initialize the detector.

        Args:
            max_sampled_files: Cap on sampled files kept in the descriptor
            max_file_chars: Per-file character budget for sampled content
        """
        self.max_sampled_files = max_sampled_files
        self.max_file_chars = max_file_chars

    def detect(
        self,
        file_list: Sequence[str],
        manifests: Dict[str, str],
        samples: Iterable[Tuple[str, str]] = (),
    ) -> StackDescriptor:
        """Classify the project.

        Args:
            file_list: Ordered relative paths (forward slashes)
            manifests: Root manifest file name -> raw text; may include ".env"
            samples: (relative path, content) pairs to carry into the prompt

        Returns:
            StackDescriptor for this run
        """
        files = sorted(dict.fromkeys(p.replace("\\", "/") for p in file_list))
        evidence = read_manifests(manifests)

        frontend = self._detect_frontend(evidence)
        backend = self._detect_backend(evidence)
        database = self._detect_database(evidence)
        structural_only = False

        if frontend is None and backend is None:
            frontend, backend = self._infer_from_layout(files)
            structural_only = frontend is not None or backend is not None

        env_text = manifests.get(ENV_FILE)
        has_env_file = env_text is not None or ENV_FILE in files
        env_var_names = read_env_var_names(env_text) if env_text else []

        descriptor = StackDescriptor(
            frontend=frontend,
            backend=backend,
            database=database,
            ecosystems=[e.ecosystem for e in evidence],
            dependency_names=self._collect_dependency_names(evidence),
            files=files[:MAX_LISTED_FILES],
            has_dockerfile=any(self._basename(p).startswith(DOCKERFILE_PREFIX) for p in files),
            has_compose_file=any(self._basename(p).startswith(COMPOSE_PREFIXES) for p in files),
            has_env_file=has_env_file,
            env_var_names=env_var_names,
            sampled_files=self._sample(samples),
            structural_only=structural_only,
        )
        logger.debug("Detected stack: %s", descriptor.description)
        return descriptor

    def _detect_frontend(self, evidence: List[ManifestEvidence]) -> Optional[FrontendInfo]:
        for manifest in evidence:
            if manifest.ecosystem != Ecosystem.NODE:
                continue
            for framework, required in FRONTEND_RULES:
                if all(manifest.has(dep) for dep in required):
                    return self._frontend_info(framework)
        return None

    def _detect_backend(self, evidence: List[ManifestEvidence]) -> Optional[BackendInfo]:
        by_ecosystem = {m.ecosystem: m for m in evidence}
        for ecosystem in BACKEND_ECOSYSTEM_ORDER:
            manifest = by_ecosystem.get(ecosystem)
            if manifest is None:
                continue
            for framework, names in BACKEND_RULES[ecosystem]:
                if manifest.has(*names):
                    return self._backend_info(framework)
            if ecosystem == Ecosystem.JAVA and manifest.has_prefix("spring-boot"):
                return self._backend_info(BackendFramework.SPRING_BOOT)
            # A go.mod is a backend even without a known web framework
            if ecosystem == Ecosystem.GO:
                return self._backend_info(BackendFramework.GO)
        return None

    def _detect_database(self, evidence: List[ManifestEvidence]) -> DatabaseType:
        for manifest in evidence:
            for database, names in DATABASE_RULES:
                if manifest.has(*names):
                    return database
        return DatabaseType.NONE

    def _infer_from_layout(self, files: List[str]) -> Tuple[Optional[FrontendInfo], Optional[BackendInfo]]:
        has_public = any(f.startswith(("public/", "static/")) for f in files)
        has_src = any(f.startswith("src/") for f in files)
        if has_public and has_src:
            return self._frontend_info(FrontendFramework.STATIC_SITE), None
        has_server = any(
            segment in SERVER_PATH_HINTS
            for f in files
            for segment in self._segments(f)
        )
        if has_server:
            return None, self._backend_info(BackendFramework.GENERIC)
        return None, None

    def _sample(self, samples: Iterable[Tuple[str, str]]) -> List[SampledFile]:
        sampled: List[SampledFile] = []
        for path, content in samples:
            if len(sampled) >= self.max_sampled_files:
                break
            # Dotenv files carry secrets and are never sampled
            if self._basename(path) == ENV_FILE:
                continue
            truncated = len(content) > self.max_file_chars
            sampled.append(SampledFile(
                path=path.replace("\\", "/"),
                content=content[: self.max_file_chars],
                truncated=truncated,
            ))
        return sampled

    @staticmethod
    def _collect_dependency_names(evidence: List[ManifestEvidence]) -> List[str]:
        names: List[str] = []
        for manifest in evidence:
            names.extend(manifest.dependencies)
        return list(dict.fromkeys(names))[:MAX_DEPENDENCY_NAMES]

    @staticmethod
    def _frontend_info(framework: FrontendFramework) -> FrontendInfo:
        return FrontendInfo(
            framework=framework,
            port=FRONTEND_PORTS[framework],
            build_output_dir=build_output_dir_for(framework),
        )

    @staticmethod
    def _backend_info(framework: BackendFramework) -> BackendInfo:
        return BackendInfo(framework=framework, port=BACKEND_PORTS[framework])

    @staticmethod
    def _basename(path: str) -> str:
        return path.rsplit("/", 1)[-1]

    @staticmethod
    def _segments(path: str) -> List[str]:
        parts = path.lower().split("/")
        segments = parts[:-1]
        stem = parts[-1].rsplit(".", 1)[0]
        segments.append(stem)
        return segments


def detect_stack(
    file_list: Sequence[str],
    manifests: Dict[str, str],
    samples: Iterable[Tuple[str, str]] = (),
) -> StackDescriptor:
    """Convenience function for one-off detection with default bounds."""
    return StackDetector().detect(file_list, manifests, samples)
