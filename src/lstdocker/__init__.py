"""
lstdocker

Loader and build driver for the libsovtoken devops image document: four
images (base, ci, android_ndk, android_build) declared in compose format and
parameterized by environment variables.

Main modules:
- config: Document loading and validation
- interpolate: Compose-style variable substitution
- datacls: Immutable service data classes
- builder: Resolution, build ordering, rendering and Docker hand-off
- utils: Logging setup

Quick start example:
```python
from lstdocker import load_default, resolve

document = load_default()
base = resolve(document["base"], {"OSNAME": "ubuntu", ...})
print(base.context, base.image)
```
"""

from .datacls import BuildArg, BuildService, BuildDocument, ResolvedBuildService
from .config import Config, load, load_file, load_default
from .builder import Builder, build_order, resolve, resolve_all, missing_variables, to_compose, dump
from .exceptions import (
    LSTDockerError,
    ConfigurationError,
    ConfigFileMissingError,
    ConfigFileUnreadableError,
    ParseError,
    DefinitionError,
    UnresolvedVariableError,
    ReferenceNotFoundError,
    CircularDependencyError,
    BuildError,
)

__version__ = "0.3.0"

__all__ = [
    # Version
    '__version__',
    # Data classes
    'BuildArg',
    'BuildService',
    'BuildDocument',
    'ResolvedBuildService',
    # Config
    'Config',
    'load',
    'load_file',
    'load_default',
    # Builder
    'Builder',
    'build_order',
    'resolve',
    'resolve_all',
    'missing_variables',
    'to_compose',
    'dump',
    # Exceptions
    'LSTDockerError',
    'ConfigurationError',
    'ConfigFileMissingError',
    'ConfigFileUnreadableError',
    'ParseError',
    'DefinitionError',
    'UnresolvedVariableError',
    'ReferenceNotFoundError',
    'CircularDependencyError',
    'BuildError',
]
