"""Pre-built Chromium from a release host: download, verify, extract, cache.

This source is strictly optional. Unmet preconditions skip it, and every
network or filesystem failure is logged and reported as "no result".
"""
import http.client
import json
import logging
import os

from ..environment import get_os_arch
from ..engine.errors import AcquireError, AcquireSignal
from ..models import BrowserInfo, Channel, SourceId
from ..settings import REPO_ENV, ProjectLayout, ResolverSettings
from ..telemetry.logger import AttemptLog
from .download import download_file
from .extract import install_extracted
from .integrity import compute_sha256, digests_match, read_expected_sha256

log = logging.getLogger(__name__)

LOG_NAME = "release-cache-download"


def read_chromium_revision(manifest_path: str) -> str | None:
    """Return the ``chromium`` revision from a Playwright browsers.json."""
    with open(manifest_path, "r", encoding="utf-8") as f:
        manifest = json.load(f)
    if not isinstance(manifest, dict):
        raise ValueError(f"Unexpected browsers.json layout in {manifest_path}")
    for entry in manifest.get("browsers", []) or []:
        if isinstance(entry, dict) and entry.get("name") == "chromium":
            revision = entry.get("revision")
            return str(revision) if revision else None
    return None


def asset_name(revision: str, os_token: str, arch_token: str) -> str:
    return f"chromium-{revision}-{os_token}-{arch_token}.zip"


def build_asset_urls(host: str, repo: str, tag: str, asset: str) -> tuple[str, str]:
    """Return ``(zip_url, sha256_url)`` for a release asset."""
    base = f"{host.rstrip('/')}/{repo.strip('/')}/releases/download/{tag}"
    zip_url = f"{base}/{asset}"
    return zip_url, f"{zip_url}.sha256"


def _cached(revision: str, path: str) -> BrowserInfo:
    return BrowserInfo(
        channel=Channel.BUNDLED.value,
        version=revision,
        path=path,
        strategy=SourceId.RELEASE_CACHE.value,
    )


def try_release_cache(layout: ProjectLayout, settings: ResolverSettings, *,
                      downloader=None) -> BrowserInfo | None:
    """Try the release cache. Returns BrowserInfo on success, None otherwise."""
    downloader = downloader or download_file
    with AttemptLog(LOG_NAME, layout.logs_dir, title="Release cache download attempt") as attempt:
        try:
            return _acquire(layout, settings, attempt, downloader)
        except (AcquireError, OSError, ValueError, http.client.HTTPException) as e:
            attempt.add(f"Release cache check failed: {e}")
            log.debug(f"Release cache check failed: {e}")
            return None


def _acquire(layout, settings, attempt, downloader):
    manifest_path = settings.get_manifest_path()
    if not manifest_path or not os.path.isfile(manifest_path):
        attempt.add(f"browsers.json not found ({manifest_path}), skipping release cache")
        return None

    revision = read_chromium_revision(manifest_path)
    if not revision:
        attempt.add("Chromium revision not found in browsers.json")
        return None
    attempt.add(f"Chromium revision: {revision}")

    os_token, arch_token = get_os_arch()
    if "unknown" in (os_token, arch_token):
        attempt.add(f"Unsupported OS/arch: {os_token}/{arch_token}")
        return None
    attempt.add(f"OS/arch: {os_token}/{arch_token}")

    cached_path = layout.revision_dir(revision)
    if os.path.exists(cached_path):
        attempt.add(f"Browsers already cached: {cached_path}")
        return _cached(revision, cached_path)

    framework_version = settings.get_framework_version()
    attempt.add(f"Playwright version: {framework_version}")

    if not settings.release_repo:
        attempt.add(f"{REPO_ENV} not set, skipping release cache")
        return None

    tag = settings.get_release_tag(framework_version)
    asset = asset_name(revision, os_token, arch_token)
    zip_url, sha_url = build_asset_urls(settings.release_host, settings.release_repo, tag, asset)
    attempt.add(f"Repo: {settings.release_repo}")
    attempt.add(f"Tag: {tag}")
    attempt.add(f"Asset: {asset}")
    attempt.add(f"URL: {zip_url}")

    zip_path = os.path.join(layout.browsers_dir, asset)
    sha_path = f"{zip_path}.sha256"
    try:
        attempt.add("Downloading ZIP...")
        size = downloader(zip_url, zip_path, settings.archive_timeout,
                          max_redirects=settings.max_redirects)
        attempt.add(f"ZIP downloaded: {size} bytes")

        attempt.add("Downloading SHA256...")
        downloader(sha_url, sha_path, settings.checksum_timeout,
                   max_redirects=settings.max_redirects)

        expected = read_expected_sha256(sha_path)
        actual = compute_sha256(zip_path)
        attempt.add(f"Expected SHA256: {expected}")
        attempt.add(f"Actual SHA256: {actual}")
        if not digests_match(expected, actual):
            attempt.add(f"ERROR: {AcquireSignal.INTEGRITY.value} - SHA256 checksum mismatch")
            log.warning("Browser cache checksum mismatch for %s", asset)
            return None
        attempt.add("Checksum verified")

        attempt.add("Extracting ZIP...")
        extracted = install_extracted(zip_path, layout.browsers_dir, revision)
        attempt.add(f"Extracted to: {extracted}")
    except (AcquireError, OSError, http.client.HTTPException) as e:
        attempt.add(f"Download failed: {e}")
        log.warning(f"Release cache download failed: {e}")
        return None
    finally:
        _discard(zip_path, sha_path)

    attempt.add("SUCCESS: Browser cache downloaded and verified")
    log.info("Pre-built browsers downloaded from release cache")
    return _cached(revision, extracted)


def _discard(*paths: str) -> None:
    for path in paths:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
