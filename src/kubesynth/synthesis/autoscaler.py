"""HorizontalPodAutoscaler synthesis from `kompose.hpa.*` labels."""

import logging
from dataclasses import dataclass

from kubesynth.ir.models import ServiceConfig
from kubesynth.models.k8s import (
    CrossVersionObjectReference,
    HorizontalPodAutoscaler,
    HorizontalPodAutoscalerSpec,
    MetricSpec,
    MetricTarget,
    ObjectMeta,
    ResourceMetricSource,
)

from .naming import (
    LABEL_HPA_CPU,
    LABEL_HPA_MAX_REPLICAS,
    LABEL_HPA_MEMORY,
    LABEL_HPA_MIN_REPLICAS,
    base_labels,
)

logger = logging.getLogger(__name__)

HPA_LABELS = (
    LABEL_HPA_CPU,
    LABEL_HPA_MEMORY,
    LABEL_HPA_MIN_REPLICAS,
    LABEL_HPA_MAX_REPLICAS,
)

DEFAULT_MIN_REPLICAS = 1
DEFAULT_MAX_REPLICAS = 3
DEFAULT_CPU_UTILIZATION = 50
DEFAULT_MEMORY_UTILIZATION = 70

# Workload kinds an autoscaler can target, with their API group.
SCALABLE_KINDS: dict[str, str] = {
    "Deployment": "apps/v1",
    "StatefulSet": "apps/v1",
    "DeploymentConfig": "apps.openshift.io/v1",
}


@dataclass(frozen=True)
class HpaValues:
    min_replicas: int
    max_replicas: int
    cpu_utilization: int
    memory_utilization: int


def has_autoscaler_labels(labels: dict[str, str]) -> bool:
    return any(label in labels for label in HPA_LABELS)


def _label_value(labels: dict[str, str], label: str, default: int) -> int:
    raw = labels.get(label)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning(f"Invalid value '{raw}' for '{label}', using {default}")
        return default
    if value < 0:
        logger.warning(f"Negative value '{raw}' for '{label}', using {default}")
        return default
    return value


def _utilization(labels: dict[str, str], label: str, default: int) -> int:
    value = _label_value(labels, label, default)
    if not 1 <= value <= 100:
        logger.warning(
            f"Utilization {value} for '{label}' outside 1-100, using {default}"
        )
        return default
    return value


def hpa_values(service: ServiceConfig) -> HpaValues:
    """
    Autoscaler settings read from the service's labels.

    Unparseable or negative values fall back to the defaults; a maximum below
    the minimum is raised to the minimum.
    """
    labels = service.labels
    min_replicas = _label_value(labels, LABEL_HPA_MIN_REPLICAS, DEFAULT_MIN_REPLICAS)
    max_replicas = _label_value(labels, LABEL_HPA_MAX_REPLICAS, DEFAULT_MAX_REPLICAS)
    if max_replicas < min_replicas:
        logger.warning(
            f"Service '{service.name}': max replicas {max_replicas} below "
            f"min replicas {min_replicas}, using {min_replicas}"
        )
        max_replicas = min_replicas

    return HpaValues(
        min_replicas=min_replicas,
        max_replicas=max_replicas,
        cpu_utilization=_utilization(labels, LABEL_HPA_CPU, DEFAULT_CPU_UTILIZATION),
        memory_utilization=_utilization(
            labels, LABEL_HPA_MEMORY, DEFAULT_MEMORY_UTILIZATION
        ),
    )


def _metrics(values: HpaValues) -> list[MetricSpec]:
    metrics = []
    for resource, utilization in (
        ("cpu", values.cpu_utilization),
        ("memory", values.memory_utilization),
    ):
        if utilization > 0:
            metrics.append(
                MetricSpec(
                    resource=ResourceMetricSource(
                        name=resource,
                        target=MetricTarget(average_utilization=utilization),
                    )
                )
            )
    return metrics


def create_autoscaler(
    name: str, kind: str, service: ServiceConfig
) -> HorizontalPodAutoscaler | None:
    """
    Autoscaler for the workload `name` of kind `kind`.

    The service's replica count is reset to 0 so the workload leaves scaling
    to the autoscaler. Kinds that cannot be scaled yield `None`.
    """
    api_version = SCALABLE_KINDS.get(kind)
    if api_version is None:
        logger.warning(
            f"Service '{service.name}' has autoscaler labels but its workload "
            f"kind '{kind}' cannot be scaled; skipping autoscaler"
        )
        return None

    values = hpa_values(service)
    service.replicas = 0
    return HorizontalPodAutoscaler(
        metadata=ObjectMeta(name=name, labels=base_labels(name)),
        spec=HorizontalPodAutoscalerSpec(
            scale_target_ref=CrossVersionObjectReference(
                api_version=api_version, kind=kind, name=name
            ),
            min_replicas=values.min_replicas,
            max_replicas=values.max_replicas,
            metrics=_metrics(values) or None,
        ),
    )
