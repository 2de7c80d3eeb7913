import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

from python_on_whales import DockerClient, docker
from python_on_whales.exceptions import DockerException

from ..datacls import BuildDocument, ResolvedBuildService
from ..exceptions import BuildError
from .resolve import resolve_all

logger = logging.getLogger(__name__)

REMOTE_CONTEXT_PREFIXES = ("http://", "https://", "git://", "git@", "ssh://")


class Builder:
    """
    Hands resolved services to the Docker engine, one image at a time in
    build order. The first engine failure stops the run.
    """

    def __init__(
        self,
        document: BuildDocument,
        environment: Optional[Mapping[str, str]] = None,
        client: Optional[DockerClient] = None,
        workdir: Optional[Union[str, Path]] = None,
    ):
        self.document = document
        self.environment = environment
        self.client = client if client is not None else docker
        self.workdir = Path(workdir) if workdir is not None else Path.cwd()
        logger.debug(f"Builder initialized for {len(document)} services. Workdir: '{self.workdir}'")

    def _context_path(self, context: str) -> str:
        if context.startswith(REMOTE_CONTEXT_PREFIXES):
            return context
        path = Path(context)
        if not path.is_absolute():
            path = self.workdir / path
        return str(path)

    def _dockerfile_path(self, context_path: str, dockerfile: Optional[str]) -> Optional[str]:
        # compose reads `dockerfile` relative to the context
        if dockerfile is None or Path(dockerfile).is_absolute():
            return dockerfile
        if context_path.startswith(REMOTE_CONTEXT_PREFIXES):
            return dockerfile
        return str(Path(context_path) / dockerfile)

    def _build_one(self, svc: ResolvedBuildService, pull: bool, cache: bool):
        context_path = self._context_path(svc.context)
        logger.info(f"[Builder] Building '{svc.name}' -> {svc.image} (context '{context_path}', network '{svc.network}')")
        try:
            self.client.buildx.build(
                context_path,
                build_args=dict(svc.args),
                network=svc.network,
                tags=[svc.image],
                file=self._dockerfile_path(context_path, svc.dockerfile),
                pull=pull,
                cache=cache,
                load=True,
            )
        except DockerException as e:
            raise BuildError(f"Failed to build image for service '{svc.name}': {e}") from e
        logger.info(f"[Builder] Built '{svc.image}'.")

    def run(
        self,
        services: Optional[Iterable[str]] = None,
        dry_run: bool = False,
        pull: bool = False,
        cache: bool = True,
    ) -> List[ResolvedBuildService]:
        """
        Resolve `services` (all by default) and build them.

        Every service is resolved before the first build starts, so a missing
        variable fails the run without building anything.
        """
        resolved = resolve_all(self.document, self.environment, services)
        if dry_run:
            for svc in resolved:
                logger.info(f"[Builder] (dry run) would build '{svc.name}' -> {svc.image} from '{self._context_path(svc.context)}'")
            return resolved

        for svc in resolved:
            self._build_one(svc, pull, cache)
        logger.info(f"[Builder] Built {len(resolved)} images.")
        return resolved
