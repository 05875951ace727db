"""
Volume synthesis: claims, config-file ConfigMaps, emptyDir, hostPath, tmpfs.

Every declared volume of a service yields one pod volume plus one mount on
the service's container. What backs the pod volume depends on the volumes
mode of the run; claims and ConfigMaps created on the way are returned next
to the pod-level pieces so the caller decides where they end up.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from pathlib import Path

from kubesynth.ir.models import ConvertOptions, ServiceConfig, VolumeMode, VolumeSpec
from kubesynth.io.files import is_config_file, read_config_source
from kubesynth.models.k8s import (
    ConfigMap,
    ConfigMapVolumeSource,
    EmptyDirVolumeSource,
    HostPathVolumeSource,
    KeyToPath,
    LabelSelector,
    ObjectMeta,
    PersistentVolumeClaim,
    PersistentVolumeClaimSpec,
    PersistentVolumeClaimVolumeSource,
    Volume,
    VolumeMount,
    VolumeResourceRequirements,
)

from .naming import (
    LABEL_VOLUME_SELECTOR,
    LABEL_VOLUME_SIZE,
    LABEL_VOLUME_STORAGE_CLASS,
    base_labels,
    format_file_name,
    format_resource_name,
)

logger = logging.getLogger(__name__)

_ACCESS_MODES: dict[str, str] = {
    "ro": "ReadOnlyMany",
    "rox": "ReadOnlyMany",
    "rwx": "ReadWriteMany",
    "rwop": "ReadWriteOncePod",
}
DEFAULT_ACCESS_MODE = "ReadWriteOnce"
TMPFS_MEDIUM = "Memory"


@dataclass
class VolumeSet:
    """Pod-level pieces and sibling objects produced for one service."""

    mounts: list[VolumeMount] = field(default_factory=list)
    volumes: list[Volume] = field(default_factory=list)
    claims: list[PersistentVolumeClaim] = field(default_factory=list)
    config_maps: list[ConfigMap] = field(default_factory=list)


def access_modes(mode: str) -> list[str]:
    return [_ACCESS_MODES.get(mode, DEFAULT_ACCESS_MODE)]


def create_claim(
    name: str,
    mode: str,
    size: str,
    selector_value: str | None = None,
    storage_class: str | None = None,
) -> PersistentVolumeClaim:
    """Claim requesting `size` of storage with the access mode of `mode`."""
    return PersistentVolumeClaim(
        metadata=ObjectMeta(name=name, labels=base_labels(name)),
        spec=PersistentVolumeClaimSpec(
            access_modes=access_modes(mode),
            resources=VolumeResourceRequirements(requests={"storage": size}),
            storage_class_name=storage_class or None,
            selector=(
                LabelSelector(match_labels=base_labels(selector_value))
                if selector_value
                else None
            ),
        ),
    )


def _volume_name(volume: VolumeSpec, fallback: str) -> str:
    if volume.volume_name:
        return format_resource_name(volume.volume_name)
    return fallback


def _mount(name: str, volume: VolumeSpec) -> VolumeMount:
    return VolumeMount(
        name=name, mount_path=volume.container, read_only=volume.read_only or None
    )


def _config_map_from_path(name: str, path: str, unit_name: str) -> ConfigMap:
    data: dict[str, str] = {}
    binary: dict[str, str] = {}
    for key, content in read_config_source(path).items():
        try:
            data[key] = content.decode("utf-8")
        except UnicodeDecodeError:
            binary[key] = base64.b64encode(content).decode("ascii")
    return ConfigMap(
        metadata=ObjectMeta(name=name, labels=base_labels(unit_name)),
        data=data or None,
        binary_data=binary or None,
    )


def _configure_config_map(
    index: int, unit_name: str, volume: VolumeSpec, into: VolumeSet
) -> None:
    name = _volume_name(volume, f"{unit_name}-cm{index}")
    config_map = _config_map_from_path(name, volume.host or "", unit_name)
    source = ConfigMapVolumeSource(name=name)
    sub_path = None
    keys = list(config_map.data or {}) + list(config_map.binary_data or {})
    if keys and not Path(volume.host or "").is_dir():
        # A single file replaces only its own path inside the container.
        sub_path = format_file_name(volume.container)
        source.items = [KeyToPath(key=keys[0], path=sub_path)]

    into.config_maps.append(config_map)
    into.volumes.append(Volume(name=name, config_map=source))
    into.mounts.append(
        VolumeMount(
            name=name,
            mount_path=volume.container,
            read_only=True,
            sub_path=sub_path,
        )
    )


def _configure_claim(
    index: int,
    unit_name: str,
    service: ServiceConfig,
    volume: VolumeSpec,
    options: ConvertOptions,
    into: VolumeSet,
) -> None:
    name = _volume_name(volume, f"{unit_name}-claim{index}")
    size = (
        volume.size
        or service.labels.get(LABEL_VOLUME_SIZE)
        or options.pvc_request_size
    )
    into.claims.append(
        create_claim(
            name,
            volume.mode,
            size,
            selector_value=(
                volume.selector_value or service.labels.get(LABEL_VOLUME_SELECTOR)
            ),
            storage_class=(
                volume.storage_class
                or service.labels.get(LABEL_VOLUME_STORAGE_CLASS)
            ),
        )
    )
    into.volumes.append(
        Volume(
            name=name,
            persistent_volume_claim=PersistentVolumeClaimVolumeSource(
                claim_name=name, read_only=volume.read_only or None
            ),
        )
    )
    into.mounts.append(_mount(name, volume))


def configure_volumes(
    unit_name: str, service: ServiceConfig, options: ConvertOptions
) -> VolumeSet:
    """
    Pod volumes, mounts, claims and ConfigMaps for the declared volumes of
    `service`, named after the workload `unit_name`.
    """
    result = VolumeSet()
    mode = options.volumes

    for index, volume in enumerate(service.volumes):
        if mode == VolumeMode.CONFIG_MAP:
            use_config_map, skip = is_config_file(volume.host or "")
            if skip:
                logger.warning(
                    f"Skipping volume '{volume.host or volume.container}' of "
                    f"service '{service.name}': not usable as a config file"
                )
                continue
            if use_config_map:
                _configure_config_map(index, unit_name, volume, result)
                continue
            _configure_claim(index, unit_name, service, volume, options, result)

        elif mode == VolumeMode.EMPTY_DIR:
            name = _volume_name(volume, f"{unit_name}-empty{index}")
            result.volumes.append(Volume(name=name, empty_dir=EmptyDirVolumeSource()))
            result.mounts.append(_mount(name, volume))

        elif mode == VolumeMode.HOST_PATH:
            if not volume.host:
                name = _volume_name(volume, f"{unit_name}-empty{index}")
                logger.warning(
                    f"Volume '{volume.volume_name or volume.container}' of "
                    f"service '{service.name}' has no host path; using emptyDir"
                )
                result.volumes.append(
                    Volume(name=name, empty_dir=EmptyDirVolumeSource())
                )
            else:
                name = _volume_name(volume, f"{unit_name}-hostpath{index}")
                result.volumes.append(
                    Volume(name=name, host_path=HostPathVolumeSource(path=volume.host))
                )
            result.mounts.append(_mount(name, volume))

        else:
            _configure_claim(index, unit_name, service, volume, options, result)

    logger.debug(
        f"Service '{service.name}': {len(result.volumes)} volume(s), "
        f"{len(result.claims)} claim(s), {len(result.config_maps)} ConfigMap(s)"
    )
    return result


def configure_tmpfs(unit_name: str, service: ServiceConfig) -> VolumeSet:
    """Memory-backed emptyDir per tmpfs entry; size options are dropped."""
    result = VolumeSet()
    for index, entry in enumerate(service.tmpfs):
        name = f"{unit_name}-tmpfs{index}"
        result.volumes.append(
            Volume(name=name, empty_dir=EmptyDirVolumeSource(medium=TMPFS_MEDIUM))
        )
        result.mounts.append(VolumeMount(name=name, mount_path=entry.split(":")[0]))
    return result
