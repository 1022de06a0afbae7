"""Loading parameter overrides from files, the command line and the environment."""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from .descriptors import ParameterValue, coerce_value
from .errors import ParameterFileError

_LOGGER = logging.getLogger(__name__)

ParameterSet = Dict[str, Dict[str, ParameterValue]]

PARAMETERS_FILE_ENV = "DEPLOY_PARAMETERS_FILE"
ARTIFACTS_DIR_ENV = "DEPLOY_ARTIFACTS_DIR"

_DECIMAL_PATTERN = re.compile(r"^-?\d+$")


def _coerce(value: Any, where: str) -> ParameterValue:
    try:
        return coerce_value(value)
    except TypeError as exc:
        raise ParameterFileError(f"{where}: {exc}") from exc


def parse_parameters(payload: Any, *, source: str = "<parameters>") -> ParameterSet:
    """Validate an already-decoded parameters document.

    The expected shape is ``{"<Module>": {"<parameter>": value}}``.
    """

    if not isinstance(payload, Mapping):
        raise ParameterFileError(f"{source}: expected an object keyed by module name")

    parameters: ParameterSet = {}
    for module_name, entries in payload.items():
        if not isinstance(entries, Mapping):
            raise ParameterFileError(f"{source}: parameters for {module_name!r} must be an object")
        parameters[str(module_name)] = {
            str(name): _coerce(value, f"{source}: {module_name}.{name}") for name, value in entries.items()
        }
    return parameters


def load_parameters_file(path: Path) -> ParameterSet:
    """Read an Ignition-style parameters JSON file."""

    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ParameterFileError(f"Unable to read parameters file {path}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParameterFileError(f"{path}: invalid JSON: {exc}") from exc

    parameters = parse_parameters(payload, source=str(path))
    _LOGGER.debug("Loaded overrides for %d module(s) from %s", len(parameters), path)
    return parameters


def parse_assignment(text: str) -> Tuple[str, str, ParameterValue]:
    """Parse a ``Module.parameter=value`` command line override.

    Plain decimal strings are read as integers in addition to the ``123n``
    notation accepted in parameter files.
    """

    target, sep, raw_value = text.partition("=")
    module_name, dot, name = target.strip().partition(".")
    if not sep or not dot or not module_name or not name:
        raise ParameterFileError(f"Expected Module.parameter=value, got {text!r}")

    raw_value = raw_value.strip()
    value: ParameterValue
    if _DECIMAL_PATTERN.match(raw_value):
        value = int(raw_value)
    else:
        value = _coerce(raw_value, target)
    return module_name, name, value


def merge_parameters(*layers: Optional[Mapping[str, Mapping[str, ParameterValue]]]) -> ParameterSet:
    """Combine override layers; later layers win for each parameter."""

    merged: ParameterSet = {}
    for layer in layers:
        if not layer:
            continue
        for module_name, entries in layer.items():
            merged.setdefault(module_name, {}).update(entries)
    return merged


@dataclass(frozen=True)
class Settings:
    """Locations configured through the environment."""

    parameters_file: Optional[Path] = None
    artifacts_dir: Optional[Path] = None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from ``env`` or from ``os.environ`` after loading ``.env``."""

    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ

    parameters_file = env.get(PARAMETERS_FILE_ENV) or None
    artifacts_dir = env.get(ARTIFACTS_DIR_ENV) or None
    return Settings(
        parameters_file=Path(parameters_file) if parameters_file else None,
        artifacts_dir=Path(artifacts_dir) if artifacts_dir else None,
    )


__all__ = [
    "ARTIFACTS_DIR_ENV",
    "PARAMETERS_FILE_ENV",
    "ParameterSet",
    "Settings",
    "load_parameters_file",
    "load_settings",
    "merge_parameters",
    "parse_assignment",
    "parse_parameters",
]
