"""telemetry — per-attempt diagnostic log files."""
from .logger import AttemptLog  # noqa: F401
