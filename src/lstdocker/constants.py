"""
Constants for lstdocker
"""

# --- Log Aliases ---
LOG_ALIAS_MAP = {
    "sub": "lstdocker.interpolate",
    "interp": "lstdocker.interpolate",
    "resolve": "lstdocker.builder.resolve",
    "res": "lstdocker.builder.resolve",
    "order": "lstdocker.builder.order",
    "build": "lstdocker.builder.build",
    "render": "lstdocker.builder.render",
    "config": "lstdocker.config",
    "cli": "lstdocker.cli",
}

KNOWN_TOP_MODULES = {
    "builder",
    "datacls",
    "interpolate",
    "utils",
    "config",
    "cli",
}

LOG_LEVELS_ENV = "LSTD_LOG_LEVELS"

# --- Build Document ---
COMPOSE_VERSION = "3.4"
SUPPORTED_MAJOR_VERSION = "3"

DEFAULT_DOCUMENT = "docker-compose.yml"
RESOURCES_PACKAGE = "lstdocker.resources"

# Services declared by the packaged document, in build order
DEFAULT_SERVICES = ("base", "ci", "android_ndk", "android_build")
