from .services import BuildArg, BuildService, BuildDocument, ResolvedBuildService

__all__ = [
    'BuildArg',
    'BuildService',
    'BuildDocument',
    'ResolvedBuildService',
]
