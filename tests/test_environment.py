"""Tests for CI detection and OS/arch normalization."""
from browser_provisioner.environment import CI_ENV_VARS, get_os_arch, is_ci


def test_clean_env_is_not_ci():
    assert not is_ci({})
    assert not is_ci({"USER": "alice", "HOME": "/home/alice"})


def test_each_ci_variable_detected():
    for name in CI_ENV_VARS:
        assert is_ci({name: "true"}), name


def test_empty_ci_variable_ignored():
    assert not is_ci({"CI": ""})


def test_ci_service_accounts():
    assert is_ci({"USER": "jenkins"})
    assert is_ci({"USER": "gitlab-runner"})
    assert is_ci({"USER": "circleci"})


def test_os_arch_tokens():
    assert get_os_arch("Linux", "x86_64") == ("linux", "x64")
    assert get_os_arch("Darwin", "arm64") == ("macos", "arm64")
    assert get_os_arch("Windows", "AMD64") == ("windows", "x64")
    assert get_os_arch("Linux", "aarch64") == ("linux", "arm64")
    assert get_os_arch("Windows", "x86") == ("windows", "x86")


def test_unsupported_host():
    assert get_os_arch("FreeBSD", "x86_64") == ("unknown", "x64")
    assert get_os_arch("Linux", "riscv64") == ("linux", "unknown")
