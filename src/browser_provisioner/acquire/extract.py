"""Zip extraction via whichever external archive tool the host has."""
import logging
import os
import shutil
import subprocess
import tempfile

from ..engine.errors import ExtractError

log = logging.getLogger(__name__)


def _extract_commands(zip_path: str, dest_dir: str) -> list[list[str]]:
    return [
        ["unzip", "-q", "-o", zip_path, "-d", dest_dir],
        ["bsdtar", "-xf", zip_path, "-C", dest_dir],
        ["tar", "-xf", zip_path, "-C", dest_dir],
    ]


def extract_zip(zip_path: str, dest_dir: str, timeout: float = 300.0) -> str:
    """Extract *zip_path* into *dest_dir* with the first tool that works.

    A tool that is missing, exits non-zero, or times out advances to the
    next candidate. Returns the name of the tool that succeeded.
    Raises ExtractError when every candidate failed.
    """
    os.makedirs(dest_dir, exist_ok=True)
    tried = []
    for args in _extract_commands(zip_path, dest_dir):
        tool = args[0]
        tried.append(tool)
        try:
            result = subprocess.run(
                args, capture_output=True, text=True, errors="replace", timeout=timeout,
            )
        except FileNotFoundError:
            log.debug("%s not installed, trying next extractor", tool)
            continue
        except subprocess.TimeoutExpired:
            log.warning("%s timed out after %.0fs, trying next extractor", tool, timeout)
            continue
        if result.returncode == 0:
            log.debug("Extracted %s with %s", os.path.basename(zip_path), tool)
            return tool
        log.debug("%s exited %d: %s", tool, result.returncode, (result.stderr or "").strip())
    raise ExtractError(f"No suitable unzip command found (tried: {', '.join(tried)})")


def install_extracted(zip_path: str, cache_dir: str, revision: str) -> str:
    """Extract into a scratch directory, then move entries into *cache_dir*.

    The archive either contains ``chromium-<revision>/`` at its root or is
    the contents of that directory. Entries already present in *cache_dir*
    (placed by a concurrent run) are kept and the fresh copy is discarded.
    Returns the final ``chromium-<revision>`` path.
    """
    target_name = f"chromium-{revision}"
    target = os.path.join(cache_dir, target_name)
    scratch = tempfile.mkdtemp(dir=cache_dir, prefix=".extract-")
    try:
        extract_zip(zip_path, scratch)
        entries = os.listdir(scratch)
        if target_name in entries:
            moves = [(os.path.join(scratch, name), os.path.join(cache_dir, name)) for name in entries]
        else:
            moves = [(scratch, target)]
        for src, dst in moves:
            if os.path.exists(dst):
                log.debug("%s already present, keeping existing copy", dst)
                continue
            os.replace(src, dst)
    finally:
        if os.path.isdir(scratch):
            shutil.rmtree(scratch, ignore_errors=True)
    if not os.path.isdir(target):
        raise ExtractError(f"Archive did not produce {target_name}")
    return target
