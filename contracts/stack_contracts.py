"""Stack detection contracts.

A StackDescriptor is produced once per analysis run and never mutated.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ProjectCategory(str, Enum):
    """Coarse project category used to select routing rules and templates."""
    FULLSTACK = "fullstack"
    FRONTEND_ONLY = "frontend-only"
    BACKEND_ONLY = "backend-only"
    API_ONLY = "api-only"
    STATIC = "static"
    UNKNOWN = "unknown"


class Ecosystem(str, Enum):
    """Language ecosystem evidenced by a dependency manifest."""
    NODE = "node"
    PYTHON = "python"
    JAVA = "java"
    RUBY = "ruby"
    GO = "go"


class FrontendFramework(str, Enum):
    NEXTJS = "nextjs"
    NUXT = "nuxt"
    VITE_REACT = "vite-react"
    VITE_VUE = "vite-vue"
    VITE = "vite"
    REACT = "react"
    VUE = "vue"
    ANGULAR = "angular"
    SVELTE = "svelte"
    STATIC_SITE = "static-site"


class BackendFramework(str, Enum):
    EXPRESS = "express"
    FASTIFY = "fastify"
    NESTJS = "nestjs"
    KOA = "koa"
    DJANGO = "django"
    FLASK = "flask"
    FASTAPI = "fastapi"
    SPRING_BOOT = "spring-boot"
    RAILS = "rails"
    SINATRA = "sinatra"
    GIN = "gin"
    ECHO = "echo"
    FIBER = "fiber"
    GO = "go"
    GENERIC = "generic"


class DatabaseType(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    NONE = "none"


# Meta-frameworks that ship their own server and therefore imply fullstack
META_FRAMEWORKS = frozenset({FrontendFramework.NEXTJS, FrontendFramework.NUXT})

BUNDLER_FRAMEWORKS = frozenset({
    FrontendFramework.VITE_REACT,
    FrontendFramework.VITE_VUE,
    FrontendFramework.VITE,
})

PYTHON_BACKENDS = frozenset({
    BackendFramework.DJANGO,
    BackendFramework.FLASK,
    BackendFramework.FASTAPI,
})

NODE_BACKENDS = frozenset({
    BackendFramework.EXPRESS,
    BackendFramework.FASTIFY,
    BackendFramework.NESTJS,
    BackendFramework.KOA,
})

GO_BACKENDS = frozenset({
    BackendFramework.GIN,
    BackendFramework.ECHO,
    BackendFramework.FIBER,
    BackendFramework.GO,
})

# WSGI/ASGI server each Python framework runs under in production
PYTHON_SERVERS = {
    BackendFramework.FLASK: "gunicorn",
    BackendFramework.DJANGO: "gunicorn",
    BackendFramework.FASTAPI: "uvicorn",
}


class FrontendInfo(BaseModel):
    """Detected frontend framework with its serving port and build output."""
    model_config = ConfigDict(frozen=True)

    framework: FrontendFramework
    port: int = Field(..., gt=0, lt=65536)
    build_output_dir: str = Field(..., description="Directory the production build writes to")


class BackendInfo(BaseModel):
    """Detected backend framework with its listening port."""
    model_config = ConfigDict(frozen=True)

    framework: BackendFramework
    port: int = Field(..., gt=0, lt=65536)


class SampledFile(BaseModel):
    """A project file whose (possibly truncated) content is shown to the model."""
    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path relative to the project root")
    content: str
    truncated: bool = False


class StackDescriptor(BaseModel):
    """Structured summary of a project's detected stack.

    The category is derived from frontend/backend presence and cannot be set.
    Only env var names are kept here; values never leave the workspace.
    """
    model_config = ConfigDict(frozen=True)

    frontend: Optional[FrontendInfo] = None
    backend: Optional[BackendInfo] = None
    database: DatabaseType = DatabaseType.NONE
    ecosystems: List[Ecosystem] = Field(default_factory=list)
    dependency_names: List[str] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list, description="Leading entries of the file listing")
    has_dockerfile: bool = False
    has_compose_file: bool = False
    has_env_file: bool = False
    env_var_names: List[str] = Field(default_factory=list)
    sampled_files: List[SampledFile] = Field(default_factory=list)
    structural_only: bool = Field(
        default=False,
        description="True when no manifest classified the project and the file layout was used"
    )

    @computed_field
    @property
    def project_category(self) -> ProjectCategory:
        if self.frontend and (self.backend or self.frontend.framework in META_FRAMEWORKS):
            return ProjectCategory.FULLSTACK
        if self.frontend:
            return ProjectCategory.FRONTEND_ONLY
        if self.backend:
            return ProjectCategory.BACKEND_ONLY
        if not self.files and not self.ecosystems:
            return ProjectCategory.UNKNOWN
        return ProjectCategory.STATIC

    @property
    def has_existing_container_files(self) -> bool:
        return self.has_dockerfile or self.has_compose_file

    @property
    def has_database(self) -> bool:
        return self.database != DatabaseType.NONE

    @property
    def has_multi_stage(self) -> bool:
        """Whether the build definition should compile in a separate stage."""
        if self.project_category == ProjectCategory.FULLSTACK:
            return True
        if self.frontend and self.frontend.framework != FrontendFramework.STATIC_SITE:
            return True
        if self.backend and (
            self.backend.framework in GO_BACKENDS
            or self.backend.framework in (BackendFramework.NESTJS, BackendFramework.SPRING_BOOT)
        ):
            return True
        return False

    @property
    def production_server(self) -> Optional[str]:
        """Production server the Python backend needs, or None."""
        if self.backend is None:
            return None
        return PYTHON_SERVERS.get(self.backend.framework)

    @property
    def declares_production_server(self) -> bool:
        """Whether the manifests already list the production server."""
        server = self.production_server
        return server is not None and server in self.dependency_names

    @property
    def app_port(self) -> int:
        """Port the application container listens on."""
        if self.backend:
            return self.backend.port
        if self.frontend:
            return self.frontend.port
        return 8080

    @property
    def routing_key(self) -> str:
        """Routing-rule catalog key; ambiguous categories route as api-only."""
        if self.project_category in (
            ProjectCategory.FULLSTACK,
            ProjectCategory.FRONTEND_ONLY,
            ProjectCategory.BACKEND_ONLY,
        ):
            return self.project_category.value
        return ProjectCategory.API_ONLY.value

    @property
    def description(self) -> str:
        text = f"This is a {self.project_category.value} project"
        if self.frontend:
            text += f" with {self.frontend.framework.value} frontend"
        if self.backend:
            text += f" and {self.backend.framework.value} backend"
        if self.has_database:
            text += f" using {self.database.value} database"
        if self.files:
            text += f". Key files include: {', '.join(self.files[:10])}"
        return text
