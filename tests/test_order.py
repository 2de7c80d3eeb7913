import pytest

from lstdocker import load, build_order
from lstdocker.exceptions import ReferenceNotFoundError

CHAIN = """
services:
  android_build:
    build: ./android_build
    image: build
    depends_on: [android_ndk, base]
  ci:
    build: ./ci
    image: ci
  android_ndk:
    build: ./android_ndk
    image: ndk
    depends_on: [base]
  base:
    build: ./base
    image: base
"""


@pytest.fixture
def chain():
    return load(CHAIN)


def test_default_document_keeps_declared_order(document):
    assert build_order(document) == ["base", "ci", "android_ndk", "android_build"]


def test_dependencies_come_first(chain):
    assert build_order(chain) == ["base", "android_ndk", "android_build", "ci"]


def test_selection_pulls_in_dependencies(chain):
    assert build_order(chain, ["android_build"]) == ["base", "android_ndk", "android_build"]


def test_selection_without_dependencies(chain):
    assert build_order(chain, ["ci"]) == ["ci"]


def test_unknown_selection(chain):
    with pytest.raises(ReferenceNotFoundError, match="'ghost'"):
        build_order(chain, ["ghost"])
