"""Loader for service-model files (YAML / JSON)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kubesynth.exceptions import ServiceModelError
from kubesynth.ir.models import ServiceModel

from .files import read_env_file

logger = logging.getLogger(__name__)

_YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
_JSON_SUFFIXES: Final[frozenset[str]] = frozenset({".json"})

_yaml = YAML(typ="safe")


def _parse(text: str, suffix: str) -> Any:
    if suffix in _JSON_SUFFIXES:
        return json.loads(text)
    return _yaml.load(text)


class ServiceModelLoader:
    """
    Read a service-model file and validate it into a `ServiceModel`.

    Paths inside the model are resolved against the model file's directory:
    env files are read and their values attached, relative host paths of
    volumes are made absolute.
    """

    supported_exts: frozenset[str] = _YAML_SUFFIXES | _JSON_SUFFIXES

    @staticmethod
    def load_raw(path: str | Path) -> dict[str, Any]:
        source = Path(path)
        suffix = source.suffix.lower()

        if not source.exists():
            logger.error(f"File not found: {source}")
            raise ServiceModelError(f"File not found: {source}", source=str(path))
        if suffix not in ServiceModelLoader.supported_exts:
            allowed = ", ".join(sorted(ServiceModelLoader.supported_exts))
            raise ServiceModelError(
                f"Unsupported extension '{source.suffix}'. Supported: {allowed}",
                source=str(path),
            )

        try:
            data = _parse(source.read_text(encoding="utf-8"), suffix)
        except (YAMLError, json.JSONDecodeError) as exc:
            raise ServiceModelError(
                f"Cannot parse {source.name}: {exc}", source=str(path)
            ) from exc

        if not isinstance(data, dict):
            raise ServiceModelError(
                "Top-level object must be a mapping", source=str(path)
            )
        logger.debug(f"Parsed {source.name}: {len(data)} top-level key(s)")
        return data

    @classmethod
    def load(cls, path: str | Path) -> ServiceModel:
        """
        Load, validate and resolve the service model at `path`.

        Raises:
            ServiceModelError: if the file is missing, unparseable, invalid,
                or references an unreadable env file.
        """
        data = cls.load_raw(path)
        try:
            model = ServiceModel.model_validate(data)
        except ValidationError as exc:
            raise ServiceModelError(
                f"Invalid service model: {exc}", source=str(path)
            ) from exc

        base_dir = Path(path).resolve().parent
        for service in model.services.values():
            for env_file in service.env_files:
                if env_file.values is not None:
                    continue
                env_path = base_dir / env_file.path
                try:
                    env_file.values = read_env_file(env_path)
                except OSError as exc:
                    raise ServiceModelError(
                        f"Cannot read env file '{env_file.path}': {exc}",
                        source=str(env_path),
                        service_name=service.name,
                    ) from exc
            for volume in service.volumes:
                if volume.host and not Path(volume.host).is_absolute():
                    volume.host = str((base_dir / volume.host).resolve())

        logger.info(f"Loaded {len(model.services)} service(s) from {path}")
        return model
