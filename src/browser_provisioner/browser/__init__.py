"""browser — discovery of browsers already installed on the host.

No network and no installs; probes well-known paths and commands only.
"""
from .system import detect_system_browser, detect_browser, browser_paths, get_browser_version  # noqa: F401
