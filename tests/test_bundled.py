"""Tests for the bundled Playwright install source."""
import os
import subprocess
import sys
import time
from unittest.mock import MagicMock, patch

from browser_provisioner.acquire.bundled import try_bundled_install

POPEN = "browser_provisioner.acquire.bundled.subprocess.Popen"
KILL_TREE = "browser_provisioner.acquire.bundled._kill_process_tree"


def _proc(returncode=0, stdout="Downloading Chromium 120.0 ... done", stderr=""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate.return_value = (stdout, stderr)
    return proc


def _read_log(layout):
    with open(os.path.join(layout.logs_dir, "playwright-browser-install.log")) as f:
        return f.read()


def test_success(layout, settings):
    with patch(POPEN, return_value=_proc(0)) as popen:
        info = try_bundled_install(layout, settings)

    assert info.channel == "bundled"
    assert info.strategy == "bundled-install"
    assert info.version is None
    assert info.path == layout.browsers_dir

    args, kwargs = popen.call_args
    assert args[0] == ["playwright-install"]
    assert kwargs["cwd"] == layout.e2e_dir
    assert kwargs["env"]["PLAYWRIGHT_BROWSERS_PATH"] == layout.browsers_dir

    log_text = _read_log(layout)
    assert "Exit code: 0" in log_text
    assert "Downloading Chromium 120.0 ... done" in log_text


def test_cache_path_not_leaked_into_process_env(layout, settings):
    before = os.environ.get("PLAYWRIGHT_BROWSERS_PATH")
    with patch(POPEN, return_value=_proc(0)):
        try_bundled_install(layout, settings)
    assert os.environ.get("PLAYWRIGHT_BROWSERS_PATH") == before


def test_nonzero_exit_is_no_result(layout, settings):
    with patch(POPEN, return_value=_proc(1, stdout="", stderr="EACCES: permission denied")):
        assert try_bundled_install(layout, settings) is None
    log_text = _read_log(layout)
    assert "Exit code: 1" in log_text
    assert "--- STDOUT ---\n(empty)" in log_text
    assert "EACCES: permission denied" in log_text


def test_spawn_error_is_no_result(layout, settings):
    with patch(POPEN, side_effect=FileNotFoundError("playwright-install")):
        assert try_bundled_install(layout, settings) is None
    assert "Process error" in _read_log(layout)


def test_timeout_kills_child(layout, settings):
    proc = _proc()
    proc.communicate.side_effect = [
        subprocess.TimeoutExpired("playwright-install", 300),
        ("partial output", ""),
    ]
    with patch(POPEN, return_value=proc), patch(KILL_TREE) as kill_tree:
        assert try_bundled_install(layout, settings) is None
    kill_tree.assert_called_once_with(proc)
    first, drain = proc.communicate.call_args_list
    assert first[1] == {"timeout": 300.0}
    assert drain[1] == {"timeout": 5.0}
    log_text = _read_log(layout)
    assert "TIMEOUT" in log_text
    assert "partial output" in log_text


def test_real_child_deadline(layout, settings):
    settings.install_command = [sys.executable, "-c", "import time; time.sleep(30)"]
    settings.install_timeout = 0.5
    assert try_bundled_install(layout, settings) is None
    assert "TIMEOUT" in _read_log(layout)


def test_drain_gives_up_on_held_pipes(layout, settings):
    proc = _proc()
    proc.communicate.side_effect = [
        subprocess.TimeoutExpired("playwright-install", 300),
        subprocess.TimeoutExpired("playwright-install", 5),
    ]
    with patch(POPEN, return_value=proc), patch(KILL_TREE):
        assert try_bundled_install(layout, settings) is None
    proc.stdout.close.assert_called_once()
    proc.stderr.close.assert_called_once()
    assert "TIMEOUT" in _read_log(layout)


def test_child_started_in_own_process_group(layout, settings):
    with patch(POPEN, return_value=_proc(0)) as popen:
        try_bundled_install(layout, settings)
    kwargs = popen.call_args[1]
    if os.name == "nt":
        assert kwargs["creationflags"] == subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        assert kwargs["start_new_session"] is True


def test_real_grandchild_deadline(layout, settings):
    settings.install_command = [
        sys.executable, "-c",
        "import subprocess, sys; "
        "subprocess.run([sys.executable, '-c', 'import time; time.sleep(30)'])",
    ]
    settings.install_timeout = 0.5
    started = time.monotonic()
    assert try_bundled_install(layout, settings) is None
    assert time.monotonic() - started < 10
    assert "TIMEOUT" in _read_log(layout)


def test_real_child_success(layout, settings):
    settings.install_command = [
        sys.executable, "-c",
        "import os; print(os.environ['PLAYWRIGHT_BROWSERS_PATH'])",
    ]
    info = try_bundled_install(layout, settings)
    assert info is not None
    assert layout.browsers_dir in _read_log(layout)
