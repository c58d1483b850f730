"""
Constants
Centralised storage for the external CLI surface and historical defaults.
"""
DEFAULT_APP_PORT = 8080
DEFAULT_APP_USER_ID = 12345

DEFAULT_SCL_COMMAND = "ruby --version"
DEFAULT_SCL_EXPECTED_OUTPUT = "ruby 2.0.0"

SHELL_PREFIX = ["bash", "-c"]

# Passed verbatim; the runtime echoes the quotes back around the address.
INSPECT_IP_FORMAT = "--format='{{ .NetworkSettings.IPAddress }}'"

EXPECTED_HTTP_STATUS = 200
