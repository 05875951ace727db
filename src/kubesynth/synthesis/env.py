"""Container environment and the ConfigMaps generated from env files."""

import logging

from kubesynth.ir.models import ServiceConfig
from kubesynth.models.k8s import (
    ConfigMap,
    ConfigMapKeySelector,
    EnvFromSource,
    EnvVar,
    EnvVarSource,
    LocalObjectReference,
    ObjectMeta,
)

from .naming import base_labels, format_env_name

logger = logging.getLogger(__name__)


def _config_map_ref(name: str, key: str, config_map: str) -> EnvVar:
    return EnvVar(
        name=name,
        value_from=EnvVarSource(
            config_map_key_ref=ConfigMapKeySelector(name=config_map, key=key)
        ),
    )


def config_envs(service: ServiceConfig) -> tuple[list[EnvVar], list[EnvFromSource]]:
    """
    Build the `env` and `envFrom` entries of a service's container.

    Env-file keys become `configMapKeyRef` entries pointing at the ConfigMap
    generated for that file; an env file whose values were not read is
    referenced whole through `envFrom`. A variable declared in
    `environment` replaces a file-sourced one with the same name. The
    returned entries are sorted by name.
    """
    by_name: dict[str, EnvVar] = {}
    env_from: list[EnvFromSource] = []

    for env_file in service.env_files:
        cm_name = format_env_name(env_file.path, service.name)
        if env_file.values is None:
            logger.debug(
                f"Env file '{env_file.path}' of service '{service.name}' "
                f"not read; referencing ConfigMap '{cm_name}' through envFrom"
            )
            env_from.append(
                EnvFromSource(config_map_ref=LocalObjectReference(name=cm_name))
            )
            continue
        for key in env_file.values:
            by_name[key] = _config_map_ref(key, key, cm_name)

    for var in service.environment:
        if var.name in by_name:
            logger.debug(
                f"Variable '{var.name}' of service '{service.name}' "
                "overrides the env-file value"
            )
        if var.config_map:
            by_name[var.name] = _config_map_ref(
                var.name, var.config_map_key or var.name, var.config_map
            )
        else:
            by_name[var.name] = EnvVar(name=var.name, value=var.value or "")

    envs = [by_name[name] for name in sorted(by_name)]
    return envs, env_from


def env_file_config_maps(service: ServiceConfig) -> list[ConfigMap]:
    """One ConfigMap per read env file, holding its key/value pairs."""
    config_maps = []
    for env_file in service.env_files:
        if env_file.values is None:
            continue
        cm_name = format_env_name(env_file.path, service.name)
        config_maps.append(
            ConfigMap(
                metadata=ObjectMeta(
                    name=cm_name,
                    labels=base_labels(cm_name),
                ),
                data=dict(env_file.values),
            )
        )
    return config_maps
