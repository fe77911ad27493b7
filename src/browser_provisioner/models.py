"""Resolver data model: strategies, channels, and the BrowserInfo record."""
from dataclasses import dataclass, asdict
from enum import Enum


class Strategy(str, Enum):
    """How the caller wants a browser acquired."""
    AUTO = "auto"
    BUNDLED_ONLY = "bundled-only"
    SYSTEM_ONLY = "system-only"
    PREFER_SYSTEM = "prefer-system"
    PREFER_BUNDLED = "prefer-bundled"


class Channel(str, Enum):
    """What was actually resolved."""
    BUNDLED = "bundled"
    MSEDGE = "msedge"
    CHROME = "chrome"


class SourceId(str, Enum):
    """Identity of the source that produced a BrowserInfo."""
    RELEASE_CACHE = "release-cache"
    BUNDLED_INSTALL = "bundled-install"
    SYSTEM = "system"
    AUTO = "auto"   # only used by the not-found sentinel


def parse_strategy(value) -> Strategy:
    """Coerce a string (or Strategy) into a Strategy; empty means auto.

    Unknown names fall back to auto, matching the dispatcher's default branch.
    """
    if isinstance(value, Strategy):
        return value
    if not value:
        return Strategy.AUTO
    try:
        return Strategy(str(value).strip().lower())
    except ValueError:
        return Strategy.AUTO


@dataclass(frozen=True)
class BrowserInfo:
    channel: str
    version: str | None
    path: str | None
    strategy: str

    @property
    def is_found(self) -> bool:
        """False for the detector's "bundled, nothing resolved" sentinel."""
        return not (self.channel == Channel.BUNDLED.value and self.path is None)

    def to_dict(self) -> dict:
        return asdict(self)


def not_found() -> BrowserInfo:
    """Sentinel returned by system detection when no browser is installed."""
    return BrowserInfo(
        channel=Channel.BUNDLED.value,
        version=None,
        path=None,
        strategy=SourceId.AUTO.value,
    )
