"""
Builder package

- resolve: placeholder substitution for services
- order: build ordering from `depends_on`
- render: resolved compose document output
- build: hand-off to the Docker engine
"""

from .order import build_order
from .resolve import resolve, resolve_all, missing_variables
from .render import to_compose, dump
from .build import Builder

__all__ = [
    'build_order',
    'resolve',
    'resolve_all',
    'missing_variables',
    'to_compose',
    'dump',
    'Builder',
]
