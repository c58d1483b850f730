"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    IMAGETEST_BUILD_TOOL         — Source-to-image build tool (default: sti)
    IMAGETEST_CONTAINER_RUNTIME  — Container runtime CLI (default: docker)
    IMAGETEST_REUSE_IMAGES       — Skip builds, reuse existing output images (default: false)
    IMAGETEST_APP_PORT           — Port the application listens on inside the container (default: 8080)
    IMAGETEST_APP_USER_ID        — Numeric non-root user the container runs as (default: 12345)
    IMAGETEST_HTTP_TIMEOUT       — Per-attempt HTTP timeout in seconds (default: 10)
    IMAGETEST_HTTP_MAX_ATTEMPTS  — Connectivity attempts before giving up (default: 10)
    IMAGETEST_HTTP_RETRY_DELAY   — Seconds between connectivity attempts (default: 1)
    IMAGETEST_SCL_COMMAND        — Command used to verify the software collection
    IMAGETEST_SCL_EXPECTED       — Substring the SCL command must print

Reuse Mode:
    When IMAGETEST_REUSE_IMAGES is set the scenario never invokes the build
    tool; the caller guarantees the output image already exists locally.

Port / User Contract:
    APP_PORT and APP_USER_ID describe the tested application's contract, not
    this library's. They are defaults only: every scenario receives its own
    ScenarioConfig and may override them.
"""
import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

from imagetest.core.constants import (
    DEFAULT_APP_PORT,
    DEFAULT_APP_USER_ID,
    DEFAULT_SCL_COMMAND,
    DEFAULT_SCL_EXPECTED_OUTPUT,
)

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool = False) -> bool:
    """Parse a boolean environment variable (1/true/yes/on)."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _settings_from_env() -> dict:
    """Read every IMAGETEST_* variable, keyed by ScenarioConfig field name."""
    return {
        "reuse_images": env_flag("IMAGETEST_REUSE_IMAGES"),
        "build_tool": os.getenv("IMAGETEST_BUILD_TOOL", "sti"),
        "container_runtime": os.getenv("IMAGETEST_CONTAINER_RUNTIME", "docker"),
        "app_port": int(os.getenv("IMAGETEST_APP_PORT", DEFAULT_APP_PORT)),
        "app_user_id": int(os.getenv("IMAGETEST_APP_USER_ID", DEFAULT_APP_USER_ID)),
        # Connectivity retry policy
        "http_timeout": float(os.getenv("IMAGETEST_HTTP_TIMEOUT", 10)),
        "http_max_attempts": int(os.getenv("IMAGETEST_HTTP_MAX_ATTEMPTS", 10)),
        "http_retry_delay": float(os.getenv("IMAGETEST_HTTP_RETRY_DELAY", 1)),
        "scl_command": os.getenv("IMAGETEST_SCL_COMMAND", DEFAULT_SCL_COMMAND),
        "scl_expected_output": os.getenv("IMAGETEST_SCL_EXPECTED", DEFAULT_SCL_EXPECTED_OUTPUT),
    }


_ENV = _settings_from_env()

BUILD_TOOL = _ENV["build_tool"]
CONTAINER_RUNTIME = _ENV["container_runtime"]
REUSE_IMAGES = _ENV["reuse_images"]

APP_PORT = _ENV["app_port"]
APP_USER_ID = _ENV["app_user_id"]

HTTP_TIMEOUT_SECONDS = _ENV["http_timeout"]
HTTP_MAX_ATTEMPTS = _ENV["http_max_attempts"]
HTTP_RETRY_DELAY_SECONDS = _ENV["http_retry_delay"]

SCL_CHECK_COMMAND = _ENV["scl_command"]
SCL_EXPECTED_OUTPUT = _ENV["scl_expected_output"]


@dataclass(frozen=True)
class ScenarioConfig:
    """
    Per-scenario settings for an image test.

    Passed explicitly into the scenario so tests with different settings can
    run side by side without touching process-wide state.
    """
    reuse_images: bool = REUSE_IMAGES
    build_tool: str = BUILD_TOOL
    container_runtime: str = CONTAINER_RUNTIME
    app_port: int = APP_PORT
    app_user_id: int = APP_USER_ID
    http_timeout: float = HTTP_TIMEOUT_SECONDS
    http_max_attempts: int = HTTP_MAX_ATTEMPTS
    http_retry_delay: float = HTTP_RETRY_DELAY_SECONDS
    scl_command: str = SCL_CHECK_COMMAND
    scl_expected_output: str = SCL_EXPECTED_OUTPUT

    @classmethod
    def from_env(cls, **overrides) -> "ScenarioConfig":
        """Build a config from the current environment, then apply overrides."""
        config = cls(**_settings_from_env())
        return replace(config, **overrides) if overrides else config

    def with_overrides(self, **overrides) -> "ScenarioConfig":
        return replace(self, **overrides)
