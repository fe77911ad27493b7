"""Resolution report: which sources ran, how each ended, what was returned.

Saved next to the attempt logs so a silent bootstrap can be diagnosed later.
"""
import json
import logging
import os
import time
from dataclasses import dataclass, field, asdict

log = logging.getLogger(__name__)

REPORT_NAME = "browser-resolution.json"


class Outcome:
    OK = "ok"
    UNAVAILABLE = "skipped or failed"
    FAILED = "failed"
    NOT_FOUND = "not found"
    NOT_TRIED = "not tried"


@dataclass
class SourceAttempt:
    source: str
    outcome: str
    elapsed: float = 0.0


@dataclass
class ResolutionReport:
    requested_strategy: str
    effective_strategy: str
    ci: bool = False
    attempts: list[SourceAttempt] = field(default_factory=list)
    result: dict | None = None
    error: str = ""
    timestamp: float = field(default_factory=time.time)

    def record(self, source: str, outcome: str, elapsed: float = 0.0) -> None:
        self.attempts.append(SourceAttempt(source, outcome, round(elapsed, 3)))

    def outcome_of(self, source: str) -> str:
        for attempt in self.attempts:
            if attempt.source == source:
                return attempt.outcome
        return Outcome.NOT_TRIED

    def to_dict(self) -> dict:
        return asdict(self)


def save_resolution_report(report: ResolutionReport, logs_dir: str) -> str:
    """Save report to JSON. Returns file path, or '' on failure."""
    try:
        os.makedirs(logs_dir, exist_ok=True)
        path = os.path.join(logs_dir, REPORT_NAME)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, ensure_ascii=False, indent=2, default=str)
        return path
    except (OSError, TypeError, ValueError) as e:
        log.debug(f"Failed to save resolution report: {e}")
        return ""
