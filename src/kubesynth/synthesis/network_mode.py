"""
Merging of services sharing another service's network namespace.

A service declared with `network_mode: service:<target>` must run in the
same pod as `<target>`. Its workload is synthesized like any other and then
folded into the target's Deployment: the containers (and pod volumes) move
over and the source workload is removed by identity.
"""

import logging
from dataclasses import dataclass
from typing import Any

from kubesynth.exceptions import NetworkModeMergeError
from kubesynth.ir.models import ConvertOptions, ServiceConfig
from kubesynth.models.k8s import Deployment, KubeObject

from .naming import format_resource_name
from .podspec import set_volumes

logger = logging.getLogger(__name__)

NETWORK_MODE_SERVICE = "service:"
WORKLOAD_KINDS = frozenset(
    {"Deployment", "StatefulSet", "DaemonSet", "Pod", "DeploymentConfig"}
)


@dataclass(frozen=True)
class DeploymentMapping:
    """Source workload to be folded into the target workload."""

    source: str
    target: str


def find_mappings(services: dict[str, ServiceConfig]) -> list[DeploymentMapping]:
    """Mappings for every service whose network mode names another service."""
    mappings = []
    for name in sorted(services):
        network_mode = services[name].network_mode
        if NETWORK_MODE_SERVICE not in network_mode:
            continue
        parts = network_mode.split(":")
        if len(parts) < 2 or not parts[1]:
            raise NetworkModeMergeError(
                f"Network mode '{network_mode}' names no service",
                source=name,
                service_name=name,
            )
        mappings.append(
            DeploymentMapping(
                source=format_resource_name(name),
                target=format_resource_name(parts[1]),
            )
        )
    return mappings


def _find_workload(objects: list[KubeObject], name: str) -> KubeObject | None:
    for obj in objects:
        if obj.kind in WORKLOAD_KINDS and obj.metadata.name == name:
            return obj
    return None


def _endpoint(
    objects: list[KubeObject], role: str, name: str, mapping: DeploymentMapping
) -> Deployment:
    obj = _find_workload(objects, name)
    if obj is None:
        raise NetworkModeMergeError(
            f"Network mode {role} workload '{name}' not found",
            source=mapping.source,
            target=mapping.target,
            service_name=mapping.source,
        )
    if not isinstance(obj, Deployment):
        raise NetworkModeMergeError(
            f"Network mode {role} '{name}' is a {obj.kind}; "
            "only Deployments can be merged",
            source=mapping.source,
            target=mapping.target,
            service_name=mapping.source,
        )
    return obj


def _merge(objects: list[KubeObject], mapping: DeploymentMapping) -> KubeObject:
    if mapping.source == mapping.target:
        raise NetworkModeMergeError(
            f"Service '{mapping.source}' cannot share its own network namespace",
            source=mapping.source,
            target=mapping.target,
            service_name=mapping.source,
        )

    source = _endpoint(objects, "source", mapping.source, mapping)
    target = _endpoint(objects, "target", mapping.target, mapping)
    source_pod = source.spec.template.spec
    target_pod = target.spec.template.spec
    target_pod.containers.extend(c.model_copy(deep=True) for c in source_pod.containers)
    set_volumes(target_pod, ServiceConfig(name=mapping.target), source_pod.volumes)
    logger.info(
        f"Merged {len(source_pod.containers)} container(s) of '{mapping.source}' "
        f"into '{mapping.target}'"
    )
    return source


def _final_target(mapping: DeploymentMapping, table: dict[str, str]) -> str:
    """Follow `mapping.target` through the other mappings to the surviving workload."""
    if mapping.source == mapping.target:
        return mapping.target
    chain = [mapping.source]
    target = mapping.target
    while target not in chain:
        if target not in table:
            return target
        chain.append(target)
        target = table[target]
    raise NetworkModeMergeError(
        f"Network mode cycle: {' -> '.join([*chain, target])}",
        source=mapping.source,
        target=mapping.target,
        service_name=mapping.source,
    )


def merge_network_modes(
    objects: list[KubeObject], services: dict[str, ServiceConfig]
) -> list[KubeObject]:
    """
    Fold every `service:` network-mode workload into its target.

    A target that itself joins another service is followed to the end of the
    chain, so every source lands in the one workload that survives.

    Raises:
        NetworkModeMergeError: when an endpoint is missing, is not a
            Deployment, a service names itself, or the mappings form a cycle.
    """
    mappings = find_mappings(services)
    if not mappings:
        return objects

    table = {m.source: m.target for m in mappings}
    removed: set[tuple[str, str, str]] = set()
    for mapping in mappings:
        final = _final_target(mapping, table)
        if final != mapping.target:
            logger.debug(
                f"'{mapping.source}' joins '{mapping.target}', which joins '{final}'"
            )
            mapping = DeploymentMapping(source=mapping.source, target=final)
        removed.add(_merge(objects, mapping).identity)
    return [obj for obj in objects if obj.identity not in removed]


class NetworkModeMergePass:
    """List pass wrapping `merge_network_modes`."""

    name = "network-mode-merge"

    def run(
        self,
        objects: list[KubeObject],
        services: dict[str, ServiceConfig],
        options: ConvertOptions,
    ) -> list[KubeObject]:
        return merge_network_modes(objects, services)

    def get_pass_info(self) -> dict[str, Any]:
        return {"name": self.name, "class": self.__class__.__name__}
