"""
lstdocker service data classes

Immutable views of a loaded build document: BuildService holds the raw
templates as written, ResolvedBuildService holds them after interpolation.
"""

from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..interpolate import variables as template_variables
from ..interpolate import required_variables as template_required_variables


class BuildArg(BaseModel):
    """
    A single build argument.

    `value` is None for the bare `KEY` form, whose value comes from the
    environment variable of the same name.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    value: Optional[str] = None

    @property
    def template(self) -> str:
        if self.value is None:
            return f"${{{self.key}}}"
        return self.value

    def __str__(self) -> str:
        return self.key if self.value is None else f"{self.key}={self.value}"


class BuildService(BaseModel):
    """A named image build as declared in the document, templates unresolved."""
    model_config = ConfigDict(frozen=True)

    name: str
    context: str
    image: str
    network: Optional[str] = None
    dockerfile: Optional[str] = None
    args: Tuple[BuildArg, ...] = ()
    depends_on: Tuple[str, ...] = ()

    def templates(self) -> Iterator[Tuple[str, str]]:
        """(field, template) pairs in resolution order."""
        yield "context", self.context
        if self.dockerfile is not None:
            yield "dockerfile", self.dockerfile
        if self.network is not None:
            yield "network", self.network
        for arg in self.args:
            yield f"args.{arg.key}", arg.template
        yield "image", self.image

    def variables(self) -> List[str]:
        names: List[str] = []
        for _, template in self.templates():
            for name in template_variables(template):
                if name not in names:
                    names.append(name)
        return names

    def required_variables(self) -> List[str]:
        names: List[str] = []
        for _, template in self.templates():
            for name in template_required_variables(template):
                if name not in names:
                    names.append(name)
        return names


class ResolvedBuildService(BaseModel):
    """A BuildService with every placeholder substituted."""
    model_config = ConfigDict(frozen=True)

    name: str
    context: str
    image: str
    network: Optional[str] = None
    dockerfile: Optional[str] = None
    args: Dict[str, str] = Field(default_factory=dict)

    def _split_image(self) -> Tuple[str, Optional[str]]:
        # a ':' before the last '/' belongs to a registry port
        slash = self.image.rfind("/")
        colon = self.image.rfind(":")
        if colon > slash:
            return self.image[:colon], self.image[colon + 1:]
        return self.image, None

    @property
    def image_name(self) -> str:
        return self._split_image()[0]

    @property
    def image_tag(self) -> Optional[str]:
        return self._split_image()[1]


class BuildDocument(BaseModel):
    """
    A loaded build document: its format version and services keyed by name.

    Iterating yields BuildService objects in document order.
    """
    model_config = ConfigDict(frozen=True)

    version: str
    services: Dict[str, BuildService] = Field(default_factory=dict)

    def __iter__(self) -> Iterator[BuildService]:  # type: ignore[override]
        return iter(self.services.values())

    def __len__(self) -> int:
        return len(self.services)

    def __contains__(self, name: object) -> bool:
        return name in self.services

    def __getitem__(self, name: str) -> BuildService:
        return self.services[name]

    @property
    def names(self) -> List[str]:
        return list(self.services.keys())
