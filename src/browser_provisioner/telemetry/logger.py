"""Per-operation plain-text attempt logs for postmortem diagnosis."""
import logging
import os
import tempfile
import time
from datetime import datetime, timezone

log = logging.getLogger(__name__)


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AttemptLog:
    """Collects timestamped lines for one acquisition attempt.

    Lines are buffered in memory and written to ``<logs_dir>/<operation>.log``
    in one go, replacing the previous attempt's file atomically.

    All file I/O is best-effort; ``write()`` never raises.
    Supports context-manager protocol; the file is written on exit.
    """

    def __init__(self, operation: str, logs_dir: str, title: str = ""):
        self.operation = operation
        self.path = os.path.join(logs_dir, f"{operation}.log")
        self._logs_dir = logs_dir
        self._started = time.monotonic()
        self._written = False
        self.lines: list[str] = [f"{title or operation} - {_iso_now()}"]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        if not self._written:
            self.write()

    def add(self, message: str) -> None:
        elapsed = time.monotonic() - self._started
        for part in str(message).splitlines() or [""]:
            self.lines.append(f"[{elapsed:7.3f}s] {part}")
        log.debug("%s: %s", self.operation, message)

    def extend(self, header: str, text: str) -> None:
        """Append a captured block (e.g. child stdout) verbatim under a header."""
        self.lines.append(f"--- {header} ---")
        self.lines.extend((text or "(empty)").rstrip("\n").splitlines() or ["(empty)"])

    def write(self) -> str:
        """Write the buffered lines. Returns the file path, or '' on failure."""
        self._written = True
        try:
            os.makedirs(self._logs_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._logs_dir, prefix=f".{self.operation}.", suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write("\n".join(self.lines) + "\n")
                os.replace(tmp_path, self.path)
            except Exception:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
            return self.path
        except OSError as e:
            log.warning(f"AttemptLog: failed to write {self.path}: {e}")
            return ""
