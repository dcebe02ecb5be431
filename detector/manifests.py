"""Dependency manifest readers.

Each reader turns the raw text of one manifest into a list of lower-cased
dependency names. Readers never raise: a malformed manifest yields None and is
treated as absent.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from contracts import Ecosystem

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
REQUIREMENTS_TXT = "requirements.txt"
POM_XML = "pom.xml"
GEMFILE = "Gemfile"
GO_MOD = "go.mod"
ENV_FILE = ".env"

# Manifest file names read from the project root, in evidence order
MANIFEST_FILES: List[str] = [PACKAGE_JSON, REQUIREMENTS_TXT, POM_XML, GEMFILE, GO_MOD]

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_POM_ARTIFACT = re.compile(r"<artifactId>\s*([^<\s]+)\s*</artifactId>")
_GEM_NAME = re.compile(r"""^\s*gem\s+['"]([^'"]+)['"]""", re.MULTILINE)
_GO_REQUIRE_LINE = re.compile(r"^\s*(?:require\s+)?([a-z0-9.-]+\.[a-z]{2,}/\S+)\s+v\S+", re.MULTILINE)
_ENV_NAME = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=", re.MULTILINE)


@dataclass
class ManifestEvidence:
    """Dependencies declared by one manifest."""
    ecosystem: Ecosystem
    source: str
    dependencies: List[str] = field(default_factory=list)

    def has(self, *names: str) -> bool:
        return any(name in self.dependencies for name in names)

    def has_prefix(self, *prefixes: str) -> bool:
        return any(dep.startswith(p) for dep in self.dependencies for p in prefixes)


def _dedupe(names: List[str]) -> List[str]:
    return list(dict.fromkeys(names))


def read_package_json(text: str) -> Optional[List[str]]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        logger.debug("Ignoring malformed package.json: %s", e)
        return None
    if not isinstance(data, dict):
        return None
    names: List[str] = []
    for section in ("dependencies", "devDependencies"):
        deps = data.get(section)
        if isinstance(deps, dict):
            names.extend(str(name).lower() for name in deps)
    return _dedupe(names)


def read_requirements_txt(text: str) -> Optional[List[str]]:
    names: List[str] = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        match = _REQUIREMENT_NAME.match(line)
        if match:
            names.append(match.group(1).lower().replace("_", "-"))
    return _dedupe(names)


def read_pom_xml(text: str) -> Optional[List[str]]:
    return _dedupe([m.lower() for m in _POM_ARTIFACT.findall(text)])


def read_gemfile(text: str) -> Optional[List[str]]:
    return _dedupe([m.lower() for m in _GEM_NAME.findall(text)])


def read_go_mod(text: str) -> Optional[List[str]]:
    return _dedupe([m.lower() for m in _GO_REQUIRE_LINE.findall(text)])


MANIFEST_READERS: Dict[str, Tuple[Ecosystem, Callable[[str], Optional[List[str]]]]] = {
    PACKAGE_JSON: (Ecosystem.NODE, read_package_json),
    REQUIREMENTS_TXT: (Ecosystem.PYTHON, read_requirements_txt),
    POM_XML: (Ecosystem.JAVA, read_pom_xml),
    GEMFILE: (Ecosystem.RUBY, read_gemfile),
    GO_MOD: (Ecosystem.GO, read_go_mod),
}


def read_manifests(manifests: Dict[str, str]) -> List[ManifestEvidence]:
    """Read every recognized manifest independently.

    Args:
        manifests: Manifest file name -> raw text

    Returns:
        One ManifestEvidence per readable manifest, in MANIFEST_FILES order
    """
    evidence: List[ManifestEvidence] = []
    for name in MANIFEST_FILES:
        text = manifests.get(name)
        if text is None:
            continue
        ecosystem, reader = MANIFEST_READERS[name]
        deps = reader(text)
        if deps is None:
            continue
        evidence.append(ManifestEvidence(ecosystem=ecosystem, source=name, dependencies=deps))
    return evidence


def read_env_var_names(text: str) -> List[str]:
    """Return variable names declared in a dotenv file. Values are discarded."""
    return _dedupe(_ENV_NAME.findall(text))
