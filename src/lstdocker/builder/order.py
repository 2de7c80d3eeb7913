import logging
from typing import Iterable, List, Optional, Set

from ..datacls import BuildDocument
from ..exceptions import CircularDependencyError, ReferenceNotFoundError

logger = logging.getLogger(__name__)


def build_order(document: BuildDocument, services: Optional[Iterable[str]] = None) -> List[str]:
    """
    Order `services` (all by default) so each comes after its `depends_on`.

    Dependencies of selected services are pulled in; otherwise document order
    is kept. Nothing is inferred beyond what `depends_on` declares.
    """
    if services is None:
        selected = document.names
    else:
        selected = list(services)
        for name in selected:
            if name not in document:
                raise ReferenceNotFoundError(f"Service '{name}' is not defined in the build document.")

    ordered: List[str] = []
    visiting: Set[str] = set()
    done: Set[str] = set()

    def visit(name: str):
        if name in done:
            return
        if name in visiting:
            raise CircularDependencyError(f"Circular dependency in services: '{name}'")
        visiting.add(name)
        for dep in document[name].depends_on:
            if dep not in document:
                raise ReferenceNotFoundError(f"Service '{name}' depends on an undefined service: '{dep}'.")
            visit(dep)
        visiting.remove(name)
        done.add(name)
        ordered.append(name)

    # walk in document order so independent services keep their position
    wanted = set(selected)
    for name in document.names:
        if name in wanted:
            visit(name)

    logger.debug(f"[Order] Build order: {ordered}")
    return ordered
