"""Host environment probes: CI detection and OS/arch asset tokens."""
import os
import platform

CI_ENV_VARS = (
    "CI",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "JENKINS_HOME",
    "CIRCLECI",
    "TRAVIS",
    "TF_BUILD",
)

# Service accounts that CI runners commonly execute as
CI_USERS = ("jenkins", "gitlab-runner", "circleci")

_OS_TOKENS = {
    "Darwin": "macos",
    "Windows": "windows",
    "Linux": "linux",
}

_ARCH_TOKENS = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
}


def is_ci(env=None) -> bool:
    """True when any recognized CI variable is set (non-empty) or USER is a CI account."""
    env = os.environ if env is None else env
    if any(env.get(name) for name in CI_ENV_VARS):
        return True
    return env.get("USER", "") in CI_USERS


def get_os_arch(system: str | None = None, machine: str | None = None) -> tuple[str, str]:
    """Normalize the host to release-asset tokens.

    Returns ``(os, arch)`` such as ``("linux", "x64")``; either element is
    ``"unknown"`` when the host is not one the release cache publishes for.
    """
    system = platform.system() if system is None else system
    machine = platform.machine() if machine is None else machine
    os_token = _OS_TOKENS.get(system, "unknown")
    arch_token = _ARCH_TOKENS.get(machine.lower(), "unknown")
    return os_token, arch_token
