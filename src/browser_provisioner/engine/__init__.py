"""engine — strategy dispatch, error signals, and resolution reports."""
from .errors import AcquireSignal, AcquireError, DownloadError, ExtractError, StrategyExhausted  # noqa: F401
from .report import ResolutionReport, SourceAttempt, save_resolution_report  # noqa: F401
from .resolver import resolve_browser, effective_strategy, source_chain, first_success  # noqa: F401
