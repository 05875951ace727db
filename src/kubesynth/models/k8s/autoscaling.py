from typing import Literal

from pydantic import Field

from .base import KubeBase, KubeObject


class CrossVersionObjectReference(KubeBase):
    api_version: str = Field(default="apps/v1")
    kind: str
    name: str


class MetricTarget(KubeBase):
    type: Literal["Utilization", "AverageValue", "Value"] = Field(
        default="Utilization"
    )
    average_utilization: int | None = Field(default=None, ge=1, le=100)


class ResourceMetricSource(KubeBase):
    name: Literal["cpu", "memory"]
    target: MetricTarget


class MetricSpec(KubeBase):
    type: Literal["Resource"] = Field(default="Resource")
    resource: ResourceMetricSource


class HorizontalPodAutoscalerSpec(KubeBase):
    scale_target_ref: CrossVersionObjectReference
    min_replicas: int = Field(..., ge=0)
    max_replicas: int = Field(..., ge=0)
    metrics: list[MetricSpec] | None = Field(default=None)


class HorizontalPodAutoscaler(KubeObject):
    api_version: str = Field(default="autoscaling/v2")
    kind: Literal["HorizontalPodAutoscaler"] = Field(
        default="HorizontalPodAutoscaler"
    )
    spec: HorizontalPodAutoscalerSpec


__all__ = [
    "CrossVersionObjectReference",
    "MetricTarget",
    "ResourceMetricSource",
    "MetricSpec",
    "HorizontalPodAutoscalerSpec",
    "HorizontalPodAutoscaler",
]
