"""System browser discovery: Microsoft Edge first, then Google Chrome.

Never raises and never mutates anything. Absence is reported through the
``not_found()`` sentinel.
"""
import logging
import os
import platform
import re
import shutil
import subprocess

from ..models import BrowserInfo, SourceId, not_found
from ..telemetry.logger import AttemptLog

log = logging.getLogger(__name__)

LOG_NAME = "system-browser-detect"

# Probe order is fixed: Edge before Chrome
BROWSERS = ("msedge", "chrome")

BROWSER_NAMES = {
    "msedge": "Microsoft Edge",
    "chrome": "Google Chrome",
}

BROWSER_COMMANDS = {
    "msedge": ["microsoft-edge", "microsoft-edge-stable"],
    "chrome": ["google-chrome", "google-chrome-stable"],
}

_VERSION_RE = re.compile(r"(\d+\.\d+\.\d+\.\d+)")


def browser_paths(browser: str, system: str | None = None, env=None) -> list[str]:
    """Well-known install locations for *browser* on *system*, in probe order."""
    system = platform.system() if system is None else system
    env = os.environ if env is None else env

    if system == "Windows":
        program_files = env.get("ProgramFiles") or "C:\\Program Files"
        program_files_x86 = env.get("ProgramFiles(x86)") or "C:\\Program Files (x86)"
        local_app_data = env.get("LOCALAPPDATA") or ""
        if browser == "msedge":
            suffix = "\\Microsoft\\Edge\\Application\\msedge.exe"
            roots = [program_files_x86, program_files, local_app_data]
        else:
            suffix = "\\Google\\Chrome\\Application\\chrome.exe"
            roots = [program_files, program_files_x86, local_app_data]
        return [f"{root}{suffix}" for root in roots if root]

    if system == "Darwin":
        if browser == "msedge":
            return ["/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge"]
        return ["/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"]

    if browser == "msedge":
        return [
            "/usr/bin/microsoft-edge",
            "/usr/bin/microsoft-edge-stable",
            "/snap/bin/microsoft-edge",
        ]
    return [
        "/usr/bin/google-chrome",
        "/usr/bin/google-chrome-stable",
        "/snap/bin/chromium",
        "/usr/bin/chromium-browser",
    ]


def parse_version(output: str) -> str | None:
    match = _VERSION_RE.search(output or "")
    return match.group(1) if match else None


def _run_version(executable: str, timeout: float) -> str:
    """Run ``<executable> --version``; raises on spawn error, timeout, or non-zero exit."""
    result = subprocess.run(
        [executable, "--version"],
        capture_output=True, text=True, errors="replace", timeout=timeout, check=True,
    )
    return result.stdout


def get_browser_version(path: str, timeout: float = 5.0) -> str | None:
    """Best-effort version of the executable at *path*; None if unknown."""
    try:
        return parse_version(_run_version(path, timeout))
    except (OSError, subprocess.SubprocessError):
        return None


def detect_browser(browser: str, attempt: AttemptLog | None = None, *,
                   system: str | None = None, env=None,
                   timeout: float = 5.0) -> BrowserInfo | None:
    """Look for one browser by path, then by command name."""
    note = attempt.add if attempt is not None else log.debug

    for candidate in browser_paths(browser, system=system, env=env):
        note(f"  Checking path: {candidate}")
        if os.path.isfile(candidate):
            version = get_browser_version(candidate, timeout=timeout)
            note(f"    Found! Version: {version or 'unknown'}")
            return BrowserInfo(
                channel=browser, version=version, path=candidate,
                strategy=SourceId.SYSTEM.value,
            )
        note("    Not found")

    for command in BROWSER_COMMANDS[browser]:
        note(f"  Checking command: {command}")
        executable = shutil.which(command) or command
        try:
            output = _run_version(executable, timeout)
        except (OSError, subprocess.SubprocessError) as e:
            note(f"    Not found: {e}")
            continue
        version = parse_version(output)
        note(f"    Found! Version: {version or 'unknown'}")
        return BrowserInfo(
            channel=browser, version=version, path=executable,
            strategy=SourceId.SYSTEM.value,
        )
    return None


def detect_system_browser(logs_dir: str, *, timeout: float = 5.0) -> BrowserInfo:
    """Return the first installed system browser, or the not-found sentinel."""
    with AttemptLog(LOG_NAME, logs_dir, title="System browser detection") as attempt:
        attempt.add(f"Platform: {platform.system()}")
        for browser in BROWSERS:
            name = BROWSER_NAMES[browser]
            attempt.add(f"Checking {name}...")
            info = detect_browser(browser, attempt, timeout=timeout)
            if info is not None:
                attempt.add(f"SUCCESS: Found {name} at {info.path} ({info.version})")
                log.info("Detected %s: %s", name, info.version or "unknown version")
                return info
        attempt.add("No system browsers found")
    return not_found()
