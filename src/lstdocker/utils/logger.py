# logger.py
import logging
import sys
import os

import colorlog

from .. import constants


def setup_logger(debug: bool = False, module_levels: dict | None = None, log_file: str | None = None):
    """
    Configures the root logger for the application with colored output.

    Args:
        debug: Enable debug logging level
        module_levels: Per-module log levels
        log_file: Optional path to log file. If provided, logs will be written to this file.
    """
    logger = logging.getLogger()
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    # Prevent duplicate handlers if this function is called multiple times
    if logger.handlers:
        _apply_module_levels(module_levels)
        return

    # Respect NO_COLOR env var (https://no-color.org/)
    use_colors = sys.stderr.isatty() and not os.environ.get("NO_COLOR")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.NOTSET)

    if use_colors:
        console_formatter = colorlog.ColoredFormatter(
            '%(log_color)s[%(levelname).4s]%(reset)s %(cyan)s%(name)s%(reset)s: %(message)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            },
            reset=True,
            style='%'
        )
    else:
        console_formatter = logging.Formatter('[%(levelname).4s] %(name)s: %(message)s')

    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        except OSError as e:
            logging.error(f"Failed to create log file handler for '{log_file}': {e}")
        else:
            file_handler.setLevel(logging.NOTSET)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s [%(levelname).4s] %(name)s: %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")

    _apply_module_levels(module_levels)


def parse_module_levels(levels: str | None) -> dict:
    """Parse "resolve=DEBUG,config=INFO" into a name -> level mapping."""
    module_levels = {}
    if not levels:
        return module_levels
    for pair in levels.split(','):
        pair = pair.strip()
        if not pair or '=' not in pair:
            continue
        name, lvl = pair.split('=', 1)
        module_levels[name.strip()] = lvl.strip().upper()
    return module_levels


def _apply_module_levels(module_levels: dict | None):
    """Apply per-module logger levels from mapping or env var LSTD_LOG_LEVELS.

    Env var example: LSTD_LOG_LEVELS="resolve=DEBUG,builder.build=INFO"
    """
    if module_levels is None:
        module_levels = parse_module_levels(os.environ.get(constants.LOG_LEVELS_ENV))

    for name, lvl_str in module_levels.items():
        lvl = logging.getLevelName(lvl_str.upper())
        if not isinstance(lvl, int):
            logging.warning(f"Ignoring unknown log level '{lvl_str}' for '{name}'.")
            continue
        logging.getLogger(_normalize_module_name(name)).setLevel(lvl)


def _normalize_module_name(name: str) -> str:
    """Normalize provided module name with alias and auto-prefix.

    - If name is an alias, expand to full module path.
    - If name ends with '.*', treat it as base logger (strip the wildcard).
    - If name does not start with 'lstdocker.' and begins with a known top module, prefix 'lstdocker.'.
    """
    if name in constants.LOG_ALIAS_MAP:
        return constants.LOG_ALIAS_MAP[name]
    if name.endswith('.*'):
        name = name[:-2]
    if not name.startswith('lstdocker.'):
        first = name.split('.', 1)[0]
        if first in constants.KNOWN_TOP_MODULES:
            name = f'lstdocker.{name}'
    return name
