"""Normalized failure signals for browser acquisition.

Sources map their own failures into these signals so the dispatcher can
log and advance the fallback chain uniformly. Only ``StrategyExhausted``
ever reaches the caller.
"""
from enum import Enum


class AcquireSignal(Enum):
    """Why a source did not produce a browser."""
    INTEGRITY = "integrity"     # checksum mismatch
    SUBPROCESS = "subprocess"   # non-zero exit or spawn error
    TIMEOUT = "timeout"         # network or subprocess deadline
    NETWORK = "network"         # HTTP status, connection, redirect loop
    EXHAUSTED = "exhausted"     # every source in the chain failed


class AcquireError(Exception):
    """Exception carrying a normalized AcquireSignal."""

    def __init__(self, signal: AcquireSignal, message: str = ""):
        self.signal = signal
        super().__init__(message or signal.value)


class DownloadError(AcquireError):
    def __init__(self, message: str, signal: AcquireSignal = AcquireSignal.NETWORK):
        super().__init__(signal, message)


class ExtractError(AcquireError):
    def __init__(self, message: str):
        super().__init__(AcquireSignal.SUBPROCESS, message)


class StrategyExhausted(AcquireError):
    """Every source for the selected strategy failed or was skipped."""

    def __init__(self, message: str, *, strategy: str, logs_dir: str,
                 remediation: list[str] | None = None, attempts: list | None = None):
        self.strategy = strategy
        self.logs_dir = logs_dir
        self.remediation = list(remediation or [])
        self.attempts = list(attempts or [])
        super().__init__(AcquireSignal.EXHAUSTED, message)
