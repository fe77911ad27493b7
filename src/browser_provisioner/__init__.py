"""browser-provisioner — resolve a launchable browser for Playwright test runs.

Tries a strategy-specific chain of sources (pre-built release cache,
Playwright's bundled install, installed system Edge/Chrome) and returns
the first that works, with per-attempt logs for postmortem diagnosis.
"""
from .models import BrowserInfo, Channel, SourceId, Strategy  # noqa: F401
from .engine.errors import AcquireSignal, AcquireError, StrategyExhausted  # noqa: F401
from .engine.resolver import resolve_browser  # noqa: F401
from .settings import ResolverSettings, ProjectLayout  # noqa: F401
from .config_patch import update_config_browser, update_context_json  # noqa: F401
