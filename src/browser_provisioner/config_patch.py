"""Write a resolved BrowserInfo into the project's config and context files."""
import json
import logging
import os
import re

from .models import BrowserInfo

log = logging.getLogger(__name__)

CONTEXT_NAME = "context.json"

_BROWSERS_RE = re.compile(r"^[ \t]*browsers[ \t]*:", re.MULTILINE)
_CHANNEL_RE = re.compile(r"^([ \t]*channel[ \t]*:[ \t]*).*$", re.MULTILINE)
_STRATEGY_RE = re.compile(r"^([ \t]*strategy[ \t]*:[ \t]*).*$", re.MULTILINE)

_BROWSERS_BLOCK = """
browsers:
  enabled:
    - chromium
  channel: {channel}
  strategy: {strategy}
  viewport:
    width: 1280
    height: 720
  headless: true
"""


def update_config_browser(config_path: str, info: BrowserInfo) -> bool:
    """Patch ``browsers.channel`` / ``browsers.strategy`` in an artk.config.yml.

    Returns False (and does nothing) when the file does not exist.
    """
    if not os.path.isfile(config_path):
        return False
    with open(config_path, "r", encoding="utf-8") as f:
        content = f.read()

    if not _BROWSERS_RE.search(content):
        if content and not content.endswith("\n"):
            content += "\n"
        content += _BROWSERS_BLOCK.format(channel=info.channel, strategy=info.strategy)
    else:
        content = _CHANNEL_RE.sub(lambda m: m.group(1) + info.channel, content, count=1)
        content = _STRATEGY_RE.sub(lambda m: m.group(1) + info.strategy, content, count=1)

    with open(config_path, "w", encoding="utf-8") as f:
        f.write(content)
    return True


def update_context_json(artk_dir: str, info: BrowserInfo) -> str:
    """Merge ``{"browser": ...}`` into ``<artk_dir>/context.json``. Returns the path."""
    os.makedirs(artk_dir, exist_ok=True)
    path = os.path.join(artk_dir, CONTEXT_NAME)
    context = {}
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                context = json.load(f)
        except ValueError as e:
            log.warning(f"Ignoring corrupt {path}: {e}")
        if not isinstance(context, dict):
            context = {}
    context["browser"] = info.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(context, f, indent=2)
        f.write("\n")
    return path
