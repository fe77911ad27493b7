"""Strategy dispatcher — entry point for browser resolution.

Each strategy maps to an ordered chain of sources. Sources are tried one
at a time; the first BrowserInfo wins and later sources never run. Only
exhausting the whole chain is an error.
"""
import logging
import time
from typing import Callable

from ..acquire.bundled import try_bundled_install
from ..acquire.release_cache import try_release_cache
from ..browser.system import detect_system_browser
from ..environment import is_ci
from ..models import BrowserInfo, SourceId, Strategy, parse_strategy
from ..settings import REPO_ENV, ProjectLayout, ResolverSettings
from .errors import StrategyExhausted
from .report import Outcome, ResolutionReport, save_resolution_report

log = logging.getLogger(__name__)

Provider = Callable[[], "BrowserInfo | None"]

_RELEASE = SourceId.RELEASE_CACHE.value
_BUNDLED = SourceId.BUNDLED_INSTALL.value
_SYSTEM = SourceId.SYSTEM.value

_CHAINS = {
    Strategy.BUNDLED_ONLY: (_RELEASE, _BUNDLED),
    Strategy.SYSTEM_ONLY: (_SYSTEM,),
    Strategy.PREFER_SYSTEM: (_SYSTEM, _RELEASE, _BUNDLED),
    Strategy.PREFER_BUNDLED: (_RELEASE, _BUNDLED, _SYSTEM),
    Strategy.AUTO: (_RELEASE, _BUNDLED, _SYSTEM),
}

_MISS_OUTCOME = {
    _RELEASE: Outcome.UNAVAILABLE,
    _BUNDLED: Outcome.FAILED,
    _SYSTEM: Outcome.NOT_FOUND,
}

FULL_REMEDIATION = [
    "Install Microsoft Edge: https://microsoft.com/edge",
    "Install Google Chrome: https://google.com/chrome",
    f"Set {REPO_ENV} for release cache",
    "Grant permissions for Playwright browser installation",
]

BUNDLED_ONLY_REMEDIATION = [
    "Check network connectivity",
    "Grant permissions for Playwright browser installation",
    f"Set {REPO_ENV} for release cache",
]

SYSTEM_ONLY_REMEDIATION = [
    "Install Microsoft Edge: https://microsoft.com/edge",
    "Install Google Chrome: https://google.com/chrome",
    'Change strategy in artk.config.yml to "auto" or "prefer-bundled"',
]


def effective_strategy(requested=None, *, skip_bundled: bool = False,
                       ci: bool = False) -> Strategy:
    """Apply the skip-bundled and CI overrides to the requested strategy."""
    if skip_bundled:
        return Strategy.SYSTEM_ONLY
    strategy = parse_strategy(requested)
    if ci and strategy is not Strategy.SYSTEM_ONLY:
        return Strategy.BUNDLED_ONLY
    return strategy


def source_chain(strategy) -> tuple[str, ...]:
    return _CHAINS[parse_strategy(strategy)]


def first_success(providers, on_result=None) -> BrowserInfo | None:
    """Call ``(name, provider)`` pairs in order; return the first non-None result.

    *on_result*, when given, is called as ``on_result(name, info, elapsed)``
    after every provider that actually ran.
    """
    for name, provider in providers:
        started = time.monotonic()
        info = provider()
        if on_result is not None:
            on_result(name, info, time.monotonic() - started)
        if info is not None:
            return info
    return None


def _system_provider(layout: ProjectLayout, settings: ResolverSettings) -> Provider:
    def provide():
        info = detect_system_browser(layout.logs_dir, timeout=settings.version_timeout)
        return info if info.is_found else None
    return provide


def build_providers(layout: ProjectLayout, settings: ResolverSettings) -> dict[str, Provider]:
    return {
        _RELEASE: lambda: try_release_cache(layout, settings),
        _BUNDLED: lambda: try_bundled_install(layout, settings),
        _SYSTEM: _system_provider(layout, settings),
    }


def _format_failure(headline: str, remediation: list[str], logs_dir: str,
                    tried: list[str] | None = None) -> str:
    lines = [headline]
    if tried:
        lines.append("Tried:")
        lines.extend(f"  {i}. {item}" for i, item in enumerate(tried, 1))
    lines.append("Solutions:")
    lines.extend(f"  {i}. {step}" for i, step in enumerate(remediation, 1))
    lines.append(f"Logs: {logs_dir}")
    return "\n".join(lines)


def exhaustion_error(strategy: Strategy, report: ResolutionReport,
                     logs_dir: str) -> StrategyExhausted:
    if strategy is Strategy.BUNDLED_ONLY:
        headline = 'Strategy is "bundled-only" but bundled browser installation failed.'
        remediation, tried = BUNDLED_ONLY_REMEDIATION, None
    elif strategy is Strategy.SYSTEM_ONLY:
        headline = 'Strategy is "system-only" but no system browsers found.'
        remediation, tried = SYSTEM_ONLY_REMEDIATION, None
    else:
        headline = "No browsers available."
        remediation = FULL_REMEDIATION
        system = report.outcome_of(_SYSTEM)
        tried = [
            f"Pre-built browser cache: {report.outcome_of(_RELEASE)}",
            f"Bundled Chromium install: {report.outcome_of(_BUNDLED)}",
            f"System Microsoft Edge: {system}",
            f"System Google Chrome: {system}",
        ]
    return StrategyExhausted(
        _format_failure(headline, remediation, logs_dir, tried),
        strategy=strategy.value,
        logs_dir=logs_dir,
        remediation=remediation,
        attempts=list(report.attempts),
    )


def resolve_browser(target_path: str, *,
                    strategy=None,
                    skip_bundled: bool = False,
                    logs_dir: str | None = None,
                    settings: ResolverSettings | None = None,
                    env=None) -> BrowserInfo:
    """Resolve a launchable browser for the project at *target_path*.

    Args:
        target_path: Project root; the cache lives in ``.artk/browsers``.
        strategy: One of the Strategy values (default ``auto``).
        skip_bundled: Force ``system-only`` regardless of CI context.
        logs_dir: Override for ``.artk/logs``.
        settings: Resolver settings; read from the environment when omitted.
        env: Environment mapping used for CI detection and settings.

    Returns:
        The BrowserInfo of the first source that succeeded.

    Raises:
        StrategyExhausted: every source in the strategy's chain failed.
    """
    layout = ProjectLayout.for_project(target_path, logs_dir=logs_dir)
    layout.ensure_dirs()
    settings = settings or ResolverSettings.from_env(env)

    ci = is_ci(env)
    resolved = effective_strategy(strategy, skip_bundled=skip_bundled, ci=ci)
    if skip_bundled:
        log.debug("skip_bundled set - using system browsers only")
    elif resolved is not parse_strategy(strategy):
        log.info("CI environment detected - using bundled browsers for reproducibility")
    log.debug("Strategy: %s", resolved.value)

    report = ResolutionReport(
        requested_strategy=parse_strategy(strategy).value,
        effective_strategy=resolved.value,
        ci=ci,
    )

    def on_result(name, info, elapsed):
        report.record(name, Outcome.OK if info is not None else _MISS_OUTCOME[name], elapsed)
        if info is None:
            log.debug("Source %s produced no browser", name)

    providers = build_providers(layout, settings)
    chain = [(name, providers[name]) for name in source_chain(resolved)]
    info = first_success(chain, on_result=on_result)

    if info is None:
        error = exhaustion_error(resolved, report, layout.logs_dir)
        report.error = str(error)
        save_resolution_report(report, layout.logs_dir)
        log.error("No browsers available (strategy %s)", resolved.value)
        raise error

    report.result = info.to_dict()
    save_resolution_report(report, layout.logs_dir)
    log.info("Browser resolved: %s (%s)", info.channel, info.strategy)
    return info
