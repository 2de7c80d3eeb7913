import logging
from typing import Any, Dict, Iterable

import yaml

from .. import constants
from ..datacls import ResolvedBuildService

logger = logging.getLogger(__name__)


def to_compose(resolved: Iterable[ResolvedBuildService], version: str = constants.COMPOSE_VERSION) -> Dict[str, Any]:
    """Fully interpolated compose document for `resolved` services."""
    services: Dict[str, Any] = {}
    for svc in resolved:
        build: Dict[str, Any] = {"context": svc.context}
        if svc.dockerfile is not None:
            build["dockerfile"] = svc.dockerfile
        if svc.network is not None:
            build["network"] = svc.network
        if svc.args:
            build["args"] = dict(svc.args)
        services[svc.name] = {"build": build, "image": svc.image}
    logger.debug(f"[Render] Rendered {len(services)} services.")
    return {"version": version, "services": services}


def dump(resolved: Iterable[ResolvedBuildService], version: str = constants.COMPOSE_VERSION) -> str:
    return yaml.safe_dump(to_compose(resolved, version), sort_keys=False, default_flow_style=False)
