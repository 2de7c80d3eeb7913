import yaml
import logging
from importlib import resources
from pathlib import Path
from typing import Dict, Any, List, Mapping, Optional, Set, Union
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator, ConfigDict

from . import constants
from .interpolate import NAME_PATTERN, validate_template
from .datacls import BuildArg, BuildService, BuildDocument
from .exceptions import (
    CircularDependencyError,
    ReferenceNotFoundError,
    ConfigFileMissingError,
    ConfigFileUnreadableError,
    ParseError,
)


logger = logging.getLogger(__name__)


MERGE_TAG = "tag:yaml.org,2002:merge"


class UniqueKeyLoader(yaml.SafeLoader):
    """
    SafeLoader that rejects duplicate keys in any mapping.

    Plain YAML loaders keep the last of two equal keys, which would silently
    drop a service defined twice.
    """

    def construct_mapping(self, node, deep=False):
        # Only keys written in this mapping are compared. Keys pulled in by a
        # `<<` merge may be overridden locally, as YAML allows.
        seen: Set[Any] = set()
        for key_node, _ in node.value:
            if key_node.tag == MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                raise ParseError(f"Unhashable mapping key at line {key_node.start_mark.line + 1}.")
            if duplicate:
                raise ParseError(f"Duplicate key '{key}' at line {key_node.start_mark.line + 1}.")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


ArgValue = Optional[Union[str, int, float, bool]]


class BuildModel(BaseModel):
    """
        Class Config-Validation Model describe a service `build` block
    """
    context: str
    dockerfile: Optional[str] = None
    network: Optional[str] = None
    args: Union[List[str], Dict[str, ArgValue]] = Field(default_factory=list)
    # other `docker-compose` build keys, we won't check
    model_config = ConfigDict(extra="allow")


class ServiceModel(BaseModel):
    """
        Class Config-Validation Model describe one entry of `services`
    """
    build: Union[str, BuildModel]
    image: str
    depends_on: Union[List[str], Dict[str, Any]] = Field(default_factory=list)
    model_config = ConfigDict(extra="allow")

    @property
    def build_block(self) -> BuildModel:
        if isinstance(self.build, str):
            return BuildModel(context=self.build)
        return self.build

    @property
    def dependencies(self) -> List[str]:
        return list(self.depends_on)


class ComposeModel(BaseModel):
    """
        Class Config-Validation Model desribe top-level of the build document
    """
    version: str = constants.COMPOSE_VERSION
    services: Dict[str, ServiceModel]
    model_config = ConfigDict(extra="allow")

    @field_validator('version', mode='before')
    @classmethod
    def coerce_version(cls, value: Any) -> str:
        # unquoted `version: 3.4` arrives as a float, so `3.10` reads as 3.1
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            logger.warning(f"Unquoted document version read as the number {value!r}; quote it to keep it exact.")
            return str(value)
        return value

    @model_validator(mode='after')
    def validate_version(self) -> 'ComposeModel':
        major = self.version.split('.', 1)[0]
        if major != constants.SUPPORTED_MAJOR_VERSION:
            raise ParseError(f"Unsupported document version '{self.version}', expected {constants.SUPPORTED_MAJOR_VERSION}.x.")
        return self

    @model_validator(mode='after')
    def validate_services_not_empty(self) -> 'ComposeModel':
        if not self.services:
            raise ParseError("Document declares no services.")
        return self

    @model_validator(mode='after')
    def validate_dependencies_and_cycles(self) -> 'ComposeModel':
        """Check that depends_on points to declared services and forms no circle"""
        defined = set(self.services.keys())
        visiting: Set[str] = set()
        visited: Set[str] = set()

        def detect_cycle(name: str):
            logger.debug(f"[Validation] Checking service '{name}' for cycles...")
            visiting.add(name)
            for dep in self.services[name].dependencies:
                if dep not in defined:
                    raise ReferenceNotFoundError(f"Service '{name}' depends on an undefined service: '{dep}'.")
                if dep in visiting:
                    raise CircularDependencyError(f"Circular dependency in services: '{name}' -> '{dep}' forms a loop.")
                if dep not in visited:
                    detect_cycle(dep)
            visiting.remove(name)
            visited.add(name)

        for name in self.services:
            if name not in visited:
                detect_cycle(name)
        logger.debug("Service dependency validation completed successfully.")
        return self


def _parse_args(service_name: str, args: Union[List[str], Dict[str, ArgValue]]) -> List[BuildArg]:
    """
    Normalize list (`KEY` / `KEY=value`) and mapping (`KEY: value`) args.
    """
    if isinstance(args, dict):
        pairs = [(key, None if value is None else _scalar_to_str(value)) for key, value in args.items()]
    else:
        pairs = []
        for item in args:
            key, sep, value = item.partition("=")
            pairs.append((key, value if sep else None))

    parsed: List[BuildArg] = []
    seen: Set[str] = set()
    for key, value in pairs:
        key = key.strip()
        if not NAME_PATTERN.fullmatch(key):
            raise ParseError(f"Service '{service_name}' has an invalid build arg name: '{key}'.")
        if key in seen:
            raise ParseError(f"Service '{service_name}' declares build arg '{key}' more than once.")
        seen.add(key)
        parsed.append(BuildArg(key=key, value=value))
    return parsed


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_service(name: str, model: ServiceModel) -> BuildService:
    build = model.build_block
    service = BuildService(
        name=name,
        context=build.context,
        image=model.image,
        network=build.network,
        dockerfile=build.dockerfile,
        args=tuple(_parse_args(name, build.args)),
        depends_on=tuple(model.dependencies),
    )
    for field, template in service.templates():
        try:
            validate_template(template)
        except ParseError as e:
            raise ParseError(f"Service '{name}', field '{field}': {e}")
    return service


def parse_yaml(text: str) -> Dict[str, Any]:
    try:
        data = yaml.load(text, Loader=UniqueKeyLoader)
    except yaml.YAMLError as e:
        raise ParseError(f"Error parsing YAML document: {e}")
    if not isinstance(data, dict):
        raise ParseError("Build document must be a YAML document containing a dictionary.")
    return data


def load(document: Union[str, Mapping[str, Any]]) -> BuildDocument:
    """
    Parse a build document into its services.

    `document` is YAML text or an already parsed mapping. Raises ParseError
    for malformed structure, duplicate names or bad templates.
    """
    if isinstance(document, str):
        data = parse_yaml(document)
    elif isinstance(document, Mapping):
        data = dict(document)
    else:
        raise ParseError(f"Cannot load a build document from {type(document).__name__}.")

    try:
        model = ComposeModel.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Build document validation failed:\n{e}")

    services = {name: _to_service(name, svc) for name, svc in model.services.items()}
    logger.debug(f"Loaded {len(services)} services: {', '.join(services)}.")
    return BuildDocument(version=model.version, services=services)


def load_file(path: Union[str, Path]) -> BuildDocument:
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigFileMissingError(f"Build document not found at: {path}")
    except UnicodeDecodeError as e:
        raise ParseError(f"Build document '{path}' is not valid UTF-8: {e}")
    except OSError as e:
        raise ConfigFileUnreadableError(f"Cannot read build document '{path}': {e}")
    logger.debug(f"Read build document from '{path}'.")
    return load(content)


def default_document_text() -> str:
    return resources.files(constants.RESOURCES_PACKAGE).joinpath(constants.DEFAULT_DOCUMENT).read_text(encoding="utf-8")


def load_default() -> BuildDocument:
    """Load the packaged libsovtoken devops image document."""
    return load(default_document_text())


class Config:
    """
    Loads and validates a build document.
    Without a path it falls back to the packaged document.
    """
    def __init__(self, config_path: Optional[str] = None):
        self.path = config_path
        if self.path is None:
            logger.info("Loading packaged build document...")
            self.document = load_default()
        else:
            logger.info(f"Loading build document from '{self.path}'...")
            self.document = load_file(self.path)
        logger.info(f"Build document validation passed ({len(self.document)} services).")

    @property
    def version(self) -> str:
        return self.document.version

    @property
    def services(self) -> Dict[str, BuildService]:
        return self.document.services

    @property
    def workdir(self) -> Path:
        """Directory build contexts are relative to."""
        if self.path is None:
            return Path.cwd()
        return Path(self.path).resolve().parent
