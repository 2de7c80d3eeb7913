from typing import Optional


class LSTDockerError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to loading and parsing the build document ---
class ConfigurationError(LSTDockerError):
    """Base class for errors encountered while finding, reading, or parsing build documents."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when the build document cannot be found."""

    pass


class ConfigFileUnreadableError(ConfigurationError):
    """Raised when the build document exists but cannot be read (directory, permissions)."""

    pass


class ParseError(ConfigurationError):
    """Raised when a build document is malformed (bad YAML, duplicate keys, missing fields)."""

    pass


# --- 2. Errors related to the logical validity of services and variables ---
class DefinitionError(LSTDockerError):
    """Base class for errors in the definitions and references within a document."""

    pass


class UnresolvedVariableError(DefinitionError):
    """Raised when a required variable has no default and is absent from the environment."""

    def __init__(self, variable: str, message: Optional[str] = None, service: Optional[str] = None):
        self.variable = variable
        self.message = message
        self.service = service
        super().__init__(variable)

    def __str__(self) -> str:
        text = f"Required variable '{self.variable}' is not set"
        if self.service:
            text += f" (service '{self.service}')"
        if self.message:
            text += f": {self.message}"
        return text


class ReferenceNotFoundError(DefinitionError):
    """Raised when a service name points to a non-existent service definition."""

    pass


class CircularDependencyError(DefinitionError):
    """Raised when a circular dependency is detected between services."""

    pass


# --- 3. Errors that occur while the engine builds images ---
class BuildError(LSTDockerError):
    """Raised when the container engine fails to build an image."""

    pass
