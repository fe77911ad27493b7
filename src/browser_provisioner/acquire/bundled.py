"""Run Playwright's own ``install chromium`` as a child process."""
import logging
import os
import signal
import subprocess

from ..models import BrowserInfo, Channel, SourceId
from ..settings import BROWSERS_PATH_ENV, ProjectLayout, ResolverSettings
from ..telemetry.logger import AttemptLog

log = logging.getLogger(__name__)

LOG_NAME = "playwright-browser-install"

# Upper bound on draining pipes after the child tree has been killed.
DRAIN_TIMEOUT = 5.0


def _child_env(browsers_dir: str, base_env=None) -> dict:
    env = dict(os.environ if base_env is None else base_env)
    env[BROWSERS_PATH_ENV] = browsers_dir
    return env


def _group_kwargs() -> dict:
    """Start the child as the leader of its own process group."""
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def _kill_process_tree(proc) -> None:
    """Kill *proc* and every process it spawned."""
    if os.name == "nt":
        try:
            subprocess.run(
                ["taskkill", "/T", "/F", "/PID", str(proc.pid)],
                capture_output=True, timeout=DRAIN_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            log.debug(f"taskkill failed: {e}")
    else:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass
    proc.kill()


def _drain(proc) -> tuple[str, str]:
    try:
        return proc.communicate(timeout=DRAIN_TIMEOUT)
    except subprocess.TimeoutExpired:
        for pipe in (proc.stdout, proc.stderr):
            if pipe is not None:
                pipe.close()
        proc.wait()
        return "", ""


def try_bundled_install(layout: ProjectLayout, settings: ResolverSettings, *,
                        base_env=None) -> BrowserInfo | None:
    """Install bundled Chromium into the project cache.

    Returns BrowserInfo on exit code 0; None on non-zero exit, spawn error,
    or when the install exceeds ``settings.install_timeout`` (the child and
    everything it spawned are killed). Captured stdout/stderr always go to the attempt log.
    """
    command = settings.get_install_command()
    with AttemptLog(LOG_NAME, layout.logs_dir, title="Playwright browser install attempt") as attempt:
        attempt.add(f"Working directory: {layout.e2e_dir}")
        attempt.add(f"Browsers cache: {layout.browsers_dir}")
        attempt.add(f"Command: {' '.join(command)}")

        log.info("Installing Playwright browsers...")
        try:
            proc = subprocess.Popen(
                command,
                cwd=layout.e2e_dir,
                env=_child_env(layout.browsers_dir, base_env),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                **_group_kwargs(),
            )
        except OSError as e:
            attempt.add(f"Process error: {e}")
            log.warning(f"Failed to install Playwright browsers: {e}")
            return None

        try:
            stdout, stderr = proc.communicate(timeout=settings.install_timeout)
        except subprocess.TimeoutExpired:
            _kill_process_tree(proc)
            stdout, stderr = _drain(proc)
            attempt.add(
                f"TIMEOUT: Installation took longer than {settings.install_timeout:.0f} seconds"
            )
            attempt.extend("STDOUT", stdout)
            attempt.extend("STDERR", stderr)
            log.warning("Browser installation timed out")
            return None

        attempt.add(f"Exit code: {proc.returncode}")
        attempt.extend("STDOUT", stdout)
        attempt.extend("STDERR", stderr)

    if proc.returncode != 0:
        log.warning("Failed to install Playwright browsers (exit code %s)", proc.returncode)
        log.debug("Details saved to: %s", attempt.path)
        return None

    log.info("Playwright browsers installed")
    return BrowserInfo(
        channel=Channel.BUNDLED.value,
        version=None,
        path=layout.browsers_dir,
        strategy=SourceId.BUNDLED_INSTALL.value,
    )
