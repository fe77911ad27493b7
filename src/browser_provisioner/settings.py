"""Runtime settings and on-disk layout for a resolver run.

All paths are runtime-injected; nothing is derived from package location.
"""
import importlib.metadata
import importlib.util
import logging
import os
import sys
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

REPO_ENV = "ARTK_PLAYWRIGHT_BROWSERS_REPO"
TAG_ENV = "ARTK_PLAYWRIGHT_BROWSERS_TAG"
HOST_ENV = "ARTK_PLAYWRIGHT_BROWSERS_HOST"
BROWSERS_PATH_ENV = "PLAYWRIGHT_BROWSERS_PATH"

DEFAULT_RELEASE_HOST = "https://github.com"
DEFAULT_FRAMEWORK_VERSION = "1.57.0"
TAG_PREFIX = "playwright-browsers"

ARTK_DIRNAME = ".artk"
E2E_DIRNAME = "artk-e2e"


@dataclass
class ResolverSettings:
    release_repo: str | None = None
    release_tag: str | None = None
    release_host: str = DEFAULT_RELEASE_HOST
    archive_timeout: float = 30.0
    checksum_timeout: float = 10.0
    install_timeout: float = 300.0
    version_timeout: float = 5.0
    max_redirects: int = 5
    framework_dir: str | None = None
    install_command: list[str] | None = None

    @classmethod
    def from_env(cls, env=None, **overrides) -> "ResolverSettings":
        """Build settings from environment variables; keyword overrides win."""
        env = os.environ if env is None else env
        values = {
            "release_repo": env.get(REPO_ENV) or None,
            "release_tag": env.get(TAG_ENV) or None,
            "release_host": env.get(HOST_ENV) or DEFAULT_RELEASE_HOST,
        }
        values.update(overrides)
        return cls(**values)

    def get_install_command(self) -> list[str]:
        if self.install_command:
            return list(self.install_command)
        return [sys.executable, "-m", "playwright", "install", "chromium"]

    def get_framework_dir(self) -> str | None:
        """Directory of the installed ``playwright`` package, or None."""
        if self.framework_dir:
            return self.framework_dir
        try:
            spec = importlib.util.find_spec("playwright")
        except (ImportError, ValueError):
            return None
        if spec is None or not spec.submodule_search_locations:
            return None
        return list(spec.submodule_search_locations)[0]

    def get_manifest_path(self) -> str | None:
        framework_dir = self.get_framework_dir()
        if not framework_dir:
            return None
        return os.path.join(framework_dir, "driver", "package", "browsers.json")

    def get_framework_version(self) -> str:
        try:
            return importlib.metadata.version("playwright")
        except importlib.metadata.PackageNotFoundError:
            log.debug("playwright distribution not found, assuming %s", DEFAULT_FRAMEWORK_VERSION)
            return DEFAULT_FRAMEWORK_VERSION

    def get_release_tag(self, framework_version: str) -> str:
        return self.release_tag or f"{TAG_PREFIX}-{framework_version}"


@dataclass(frozen=True)
class ProjectLayout:
    """Where a project keeps its browser cache, logs, and e2e workspace."""
    project_path: str
    artk_dir: str
    browsers_dir: str
    logs_dir: str
    e2e_dir: str = field(default="")

    @classmethod
    def for_project(cls, project_path: str, logs_dir: str | None = None) -> "ProjectLayout":
        project_path = os.path.abspath(project_path)
        artk_dir = os.path.join(project_path, ARTK_DIRNAME)
        e2e_dir = os.path.join(project_path, E2E_DIRNAME)
        if not os.path.isdir(e2e_dir):
            e2e_dir = project_path
        return cls(
            project_path=project_path,
            artk_dir=artk_dir,
            browsers_dir=os.path.join(artk_dir, "browsers"),
            logs_dir=logs_dir or os.path.join(artk_dir, "logs"),
            e2e_dir=e2e_dir,
        )

    def ensure_dirs(self) -> None:
        os.makedirs(self.browsers_dir, exist_ok=True)
        os.makedirs(self.logs_dir, exist_ok=True)

    def revision_dir(self, revision: str) -> str:
        return os.path.join(self.browsers_dir, f"chromium-{revision}")
