import logging
import os
from typing import Dict, Iterable, List, Mapping, Optional, Union

from ..datacls import BuildDocument, BuildService, ResolvedBuildService
from ..interpolate import interpolate, unresolved_variables
from ..config import load_default
from ..exceptions import ReferenceNotFoundError, UnresolvedVariableError
from .order import build_order

logger = logging.getLogger(__name__)


def _environment(environment: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environment is None else environment


def _lookup(name: str, document: Optional[BuildDocument]) -> BuildService:
    if document is None:
        document = load_default()
    if name not in document:
        raise ReferenceNotFoundError(f"Service '{name}' is not defined in the build document.")
    return document[name]


def resolve(
    service: Union[BuildService, str],
    environment: Optional[Mapping[str, str]] = None,
    document: Optional[BuildDocument] = None,
) -> ResolvedBuildService:
    """
    Substitute every placeholder of `service` against `environment`.

    `service` may be a name, looked up in `document` (the packaged document
    by default).

    Fields are resolved in the order context, dockerfile, network, args,
    image; the first absent required variable raises UnresolvedVariableError.
    """
    if isinstance(service, str):
        service = _lookup(service, document)
    env = _environment(environment)
    logger.debug(f"[Resolver] Resolving service '{service.name}'...")

    def sub(field: str, template: str) -> str:
        try:
            return interpolate(template, env)
        except UnresolvedVariableError as e:
            logger.debug(f"[Resolver] Service '{service.name}', field '{field}' needs '{e.variable}'.")
            raise UnresolvedVariableError(e.variable, e.message, service=service.name) from None

    context = sub("context", service.context)
    dockerfile = sub("dockerfile", service.dockerfile) if service.dockerfile is not None else None
    network = sub("network", service.network) if service.network is not None else None
    args = {arg.key: sub(f"args.{arg.key}", arg.template) for arg in service.args}
    image = sub("image", service.image)

    resolved = ResolvedBuildService(
        name=service.name,
        context=context,
        image=image,
        network=network,
        dockerfile=dockerfile,
        args=args,
    )
    logger.debug(f"[Resolver] Service '{service.name}' resolved: {resolved.model_dump(exclude_none=True)}")
    return resolved


def resolve_all(
    document: BuildDocument,
    environment: Optional[Mapping[str, str]] = None,
    services: Optional[Iterable[str]] = None,
) -> List[ResolvedBuildService]:
    """Resolve `services` (all by default) plus their dependencies, in build order."""
    env = _environment(environment)
    names = build_order(document, services)
    logger.info(f"Resolving {len(names)} services: {', '.join(names)}")
    return [resolve(document[name], env) for name in names]


def missing_variables(
    document: BuildDocument,
    environment: Optional[Mapping[str, str]] = None,
) -> Dict[str, List[str]]:
    """
    Map each service that cannot be resolved to the sorted list of absent
    required variables. Services that resolve cleanly are left out.
    """
    env = _environment(environment)
    report: Dict[str, List[str]] = {}
    for service in document:
        missing = sorted({
            name
            for _, template in service.templates()
            for name in unresolved_variables(template, env)
        })
        if missing:
            report[service.name] = missing
    return report
