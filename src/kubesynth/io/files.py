"""Local filesystem helpers: config-file detection and env-file parsing."""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import Final

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

_SOCKET_SUFFIX: Final[str] = ".sock"


def check_is_empty_dir(path: str | Path) -> bool:
    """
    True when `path` holds no regular file at any depth.

    Raises:
        OSError: if the directory (or a subdirectory) cannot be listed.
    """
    for entry in Path(path).iterdir():
        if entry.is_dir():
            if not check_is_empty_dir(entry):
                return False
        else:
            return False
    return True


def is_config_file(path: str) -> tuple[bool, bool]:
    """
    Decide how a host path mounted in `configMap` volume mode is handled.

    Returns:
        `(use_config_map, skip)`. Sockets, empty paths and unreadable
        directories are skipped; missing paths and empty directories are not
        config files and fall back to a claim.
    """
    if not path or path.endswith(_SOCKET_SUFFIX):
        return False, True

    try:
        is_dir = os.path.isdir(path)
        os.stat(path)
    except OSError as e:
        logger.warning(f"File '{path}' does not exist or cannot be read: {e}")
        return False, False

    if is_dir:
        try:
            if check_is_empty_dir(path):
                return False, False
        except OSError as e:
            logger.warning(f"Cannot read directory '{path}': {e}")
            return False, True
    return True, False


def read_config_source(path: str | Path) -> dict[str, bytes]:
    """
    Contents of a config file or of the regular files directly inside a
    config directory, keyed by file name in sorted order.

    Raises:
        OSError: if a file cannot be read.
    """
    source = Path(path)
    if not source.is_dir():
        return {source.name: source.read_bytes()}
    return {
        entry.name: entry.read_bytes()
        for entry in sorted(source.iterdir())
        if entry.is_file()
    }


def read_env_file(path: str | Path) -> dict[str, str]:
    """
    Parse an env file with python-dotenv.

    Quoting, escapes, inline comments, multiline values and `${VAR}`
    references (to earlier keys, then the process environment) follow
    dotenv rules. Keys declared without `=` carry no value and are skipped
    with a warning; unparseable lines are reported by dotenv itself.

    Raises:
        OSError: if the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    values: dict[str, str] = {}
    for key, value in dotenv_values(stream=io.StringIO(text)).items():
        if value is None:
            logger.warning(f"Ignoring '{key}' in env file '{path}': no value")
            continue
        values[key] = value
    return values
