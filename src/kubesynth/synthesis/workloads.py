"""One constructor per workload variant, selected by controller name."""

import logging
from collections.abc import Callable

from kubesynth.exceptions import UnsupportedVariantError
from kubesynth.ir.models import Controller, ConvertOptions, ServiceConfig
from kubesynth.models.k8s import (
    DaemonSet,
    DaemonSetSpec,
    Deployment,
    DeploymentConfig,
    DeploymentConfigSpec,
    DeploymentSpec,
    LabelSelector,
    ObjectMeta,
    Pod,
    StatefulSet,
    StatefulSetSpec,
    WorkloadObject,
)

from .naming import base_labels, object_labels
from .podspec import restart_policy

logger = logging.getLogger(__name__)

POD = "pod"

WorkloadBuilder = Callable[[str, ServiceConfig, int], WorkloadObject]


def _metadata(name: str, service: ServiceConfig) -> ObjectMeta:
    return ObjectMeta(name=name, labels=object_labels(name, service))


def _selector(name: str) -> LabelSelector:
    return LabelSelector(match_labels=base_labels(name))


def build_deployment(name: str, service: ServiceConfig, replicas: int) -> Deployment:
    return Deployment(
        metadata=_metadata(name, service),
        spec=DeploymentSpec(replicas=replicas or None, selector=_selector(name)),
    )


def build_statefulset(
    name: str, service: ServiceConfig, replicas: int
) -> StatefulSet:
    return StatefulSet(
        metadata=_metadata(name, service),
        spec=StatefulSetSpec(
            replicas=replicas or None, selector=_selector(name), service_name=name
        ),
    )


def build_daemonset(name: str, service: ServiceConfig, replicas: int) -> DaemonSet:
    return DaemonSet(
        metadata=_metadata(name, service),
        spec=DaemonSetSpec(selector=_selector(name)),
    )


def build_deploymentconfig(
    name: str, service: ServiceConfig, replicas: int
) -> DeploymentConfig:
    return DeploymentConfig(
        metadata=_metadata(name, service),
        spec=DeploymentConfigSpec(
            replicas=replicas or None,
            selector=base_labels(name),
            triggers=[{"type": "ConfigChange"}],
        ),
    )


def build_pod(name: str, service: ServiceConfig, replicas: int) -> Pod:
    return Pod(metadata=_metadata(name, service))


WORKLOAD_BUILDERS: dict[str, WorkloadBuilder] = {
    Controller.DEPLOYMENT.value: build_deployment,
    Controller.STATEFULSET.value: build_statefulset,
    Controller.DAEMONSET.value: build_daemonset,
    Controller.DEPLOYMENTCONFIG.value: build_deploymentconfig,
    POD: build_pod,
}

WORKLOAD_KINDS: dict[str, str] = {
    Controller.DEPLOYMENT.value: "Deployment",
    Controller.STATEFULSET.value: "StatefulSet",
    Controller.DAEMONSET.value: "DaemonSet",
    Controller.DEPLOYMENTCONFIG.value: "DeploymentConfig",
    POD: "Pod",
}


def select_controller(
    service: ServiceConfig, options: ConvertOptions, grouped: bool = False
) -> str:
    """
    Controller name for a unit.

    An explicit controller always wins. Otherwise an ungrouped service whose
    restart policy is not `Always` becomes a bare pod; everything else is a
    deployment.
    """
    if options.controller != Controller.AUTO:
        return options.controller.value
    policy = restart_policy(service.name, service.restart)
    if not grouped and policy != "Always":
        logger.info(
            f"Creating a pod for service '{service.name}' "
            f"due to restart policy '{service.restart}'"
        )
        return POD
    return Controller.DEPLOYMENT.value


def workload_kind(controller: str) -> str:
    try:
        return WORKLOAD_KINDS[controller]
    except KeyError:
        raise UnsupportedVariantError(
            f"Unknown controller '{controller}'", kind=controller
        ) from None


def build_workload(
    controller: str, name: str, service: ServiceConfig, replicas: int
) -> WorkloadObject:
    """
    Construct an empty workload of the variant named by `controller`.

    A `replicas` of 0 leaves the field unset.

    Raises:
        UnsupportedVariantError: for a controller name with no constructor.
    """
    builder = WORKLOAD_BUILDERS.get(controller)
    if builder is None:
        raise UnsupportedVariantError(
            f"Unknown controller '{controller}'",
            kind=controller,
            service_name=service.name,
        )
    return builder(name, service, replicas)
