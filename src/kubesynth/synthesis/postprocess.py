"""Final ordering, deduplication and workload update strategies."""

import logging
from typing import Any

from kubesynth.ir.models import ConvertOptions, ServiceConfig, VolumeMode
from kubesynth.models.k8s import (
    Deployment,
    DeploymentConfig,
    DeploymentConfigStrategy,
    DeploymentStrategy,
    KubeObject,
    PersistentVolumeClaim,
    PersistentVolumeClaimTemplate,
    StatefulSet,
)

logger = logging.getLogger(__name__)

RECREATE = "Recreate"


def sort_services_first(objects: list[KubeObject]) -> list[KubeObject]:
    """Stable partition: Services first, everything else after, order kept."""
    services = [obj for obj in objects if obj.kind == "Service"]
    others = [obj for obj in objects if obj.kind != "Service"]
    return services + others


def remove_duplicates(objects: list[KubeObject]) -> list[KubeObject]:
    """Keep the first object of every (kind, namespace, name) identity."""
    seen: set[tuple[str, str, str]] = set()
    result = []
    for obj in objects:
        if obj.identity in seen:
            logger.debug(f"Dropping duplicate {obj.kind} '{obj.metadata.name}'")
            continue
        seen.add(obj.identity)
        result.append(obj)
    return result


def apply_update_strategy(
    obj: KubeObject,
    service: ServiceConfig,
    options: ConvertOptions,
    claims: list[PersistentVolumeClaim] | None = None,
) -> None:
    """
    Adjust a workload built for a service that declares volumes.

    Deployments and DeploymentConfigs get the `Recreate` strategy. A
    StatefulSet receives `claims` as its volume claim templates, except in
    `configMap` volumes mode.
    """
    if not service.volumes:
        return

    if isinstance(obj, Deployment):
        obj.spec.strategy = DeploymentStrategy(type=RECREATE)
    elif isinstance(obj, DeploymentConfig):
        obj.spec.strategy = DeploymentConfigStrategy(type=RECREATE)
    elif isinstance(obj, StatefulSet) and options.volumes != VolumeMode.CONFIG_MAP:
        templates = obj.spec.volume_claim_templates or []
        names = {t.metadata.name for t in templates}
        for claim in claims or []:
            if claim.metadata.name not in names:
                templates.append(PersistentVolumeClaimTemplate.from_claim(claim))
                names.add(claim.metadata.name)
        obj.spec.volume_claim_templates = templates or None


class SortServicesFirstPass:
    name = "sort-services-first"

    def run(
        self,
        objects: list[KubeObject],
        services: dict[str, ServiceConfig],
        options: ConvertOptions,
    ) -> list[KubeObject]:
        return sort_services_first(objects)

    def get_pass_info(self) -> dict[str, Any]:
        return {"name": self.name, "class": self.__class__.__name__}


class RemoveDuplicatesPass:
    name = "remove-duplicates"

    def run(
        self,
        objects: list[KubeObject],
        services: dict[str, ServiceConfig],
        options: ConvertOptions,
    ) -> list[KubeObject]:
        return remove_duplicates(objects)

    def get_pass_info(self) -> dict[str, Any]:
        return {"name": self.name, "class": self.__class__.__name__}
