import logging

import pytest

from lstdocker.utils.logger import parse_module_levels, _normalize_module_name, _apply_module_levels


@pytest.mark.parametrize("levels, expected", [
    (None, {}),
    ("", {}),
    ("resolve=debug", {"resolve": "DEBUG"}),
    (" config=INFO , builder.*=warning,junk", {"config": "INFO", "builder.*": "WARNING"}),
])
def test_parse_module_levels(levels, expected):
    assert parse_module_levels(levels) == expected


@pytest.mark.parametrize("name, expected", [
    ("res", "lstdocker.builder.resolve"),
    ("sub", "lstdocker.interpolate"),
    ("builder.*", "lstdocker.builder"),
    ("builder.order", "lstdocker.builder.order"),
    ("urllib3", "urllib3"),
])
def test_normalize_module_name(name, expected):
    assert _normalize_module_name(name) == expected


def test_apply_levels_from_env(monkeypatch):
    monkeypatch.setenv("LSTD_LOG_LEVELS", "order=DEBUG,config=bogus")
    target = logging.getLogger("lstdocker.builder.order")
    previous = target.level
    try:
        _apply_module_levels(None)
        assert target.level == logging.DEBUG
    finally:
        target.setLevel(previous)
