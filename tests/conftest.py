import json
import os

import pytest

from browser_provisioner.settings import ProjectLayout, ResolverSettings

REVISION = "1148"


def write_manifest(framework_dir, revision=REVISION):
    manifest_dir = os.path.join(framework_dir, "driver", "package")
    os.makedirs(manifest_dir, exist_ok=True)
    browsers = [{"name": "firefox", "revision": "1466"}]
    if revision:
        browsers.append({"name": "chromium", "revision": revision, "installByDefault": True})
    with open(os.path.join(manifest_dir, "browsers.json"), "w") as f:
        json.dump({"comment": "test", "browsers": browsers}, f)


@pytest.fixture
def layout(tmp_path):
    project = ProjectLayout.for_project(str(tmp_path / "project"))
    project.ensure_dirs()
    return project


@pytest.fixture
def settings(tmp_path):
    framework_dir = str(tmp_path / "playwright")
    write_manifest(framework_dir)
    return ResolverSettings(
        release_repo="acme/browsers",
        release_tag="playwright-browsers-1.57.0",
        framework_dir=framework_dir,
        install_command=["playwright-install"],
    )
