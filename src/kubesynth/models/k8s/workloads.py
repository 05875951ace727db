"""
Workload controllers.

Every variant owns exactly one pod template and one ObjectMeta; the bare
`Pod` lives in `core` and carries its spec directly.
"""

from typing import Any, Literal

from pydantic import Field

from .base import KubeBase, KubeObject, LabelSelector
from .core import PodTemplateSpec
from .storage import PersistentVolumeClaimTemplate


class DeploymentStrategy(KubeBase):
    type: Literal["Recreate", "RollingUpdate"] | None = Field(default=None)


class DeploymentSpec(KubeBase):
    replicas: int | None = Field(default=None, ge=0)
    selector: LabelSelector | None = Field(default=None)
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)
    strategy: DeploymentStrategy | None = Field(default=None)


class Deployment(KubeObject):
    api_version: str = Field(default="apps/v1")
    kind: Literal["Deployment"] = Field(default="Deployment")
    spec: DeploymentSpec = Field(default_factory=DeploymentSpec)


class StatefulSetSpec(KubeBase):
    replicas: int | None = Field(default=None, ge=0)
    selector: LabelSelector | None = Field(default=None)
    service_name: str | None = Field(default=None)
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)
    volume_claim_templates: list[PersistentVolumeClaimTemplate] | None = Field(
        default=None
    )


class StatefulSet(KubeObject):
    api_version: str = Field(default="apps/v1")
    kind: Literal["StatefulSet"] = Field(default="StatefulSet")
    spec: StatefulSetSpec = Field(default_factory=StatefulSetSpec)


class DaemonSetSpec(KubeBase):
    selector: LabelSelector | None = Field(default=None)
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)


class DaemonSet(KubeObject):
    api_version: str = Field(default="apps/v1")
    kind: Literal["DaemonSet"] = Field(default="DaemonSet")
    spec: DaemonSetSpec = Field(default_factory=DaemonSetSpec)


class DeploymentConfigStrategy(KubeBase):
    type: Literal["Recreate", "Rolling"] | None = Field(default=None)


class DeploymentConfigSpec(KubeBase):
    replicas: int | None = Field(default=None, ge=0)
    selector: dict[str, str] | None = Field(default=None)
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)
    strategy: DeploymentConfigStrategy | None = Field(default=None)
    triggers: list[dict[str, Any]] | None = Field(default=None)


class DeploymentConfig(KubeObject):
    """OpenShift deployment config."""

    api_version: str = Field(default="apps.openshift.io/v1")
    kind: Literal["DeploymentConfig"] = Field(default="DeploymentConfig")
    spec: DeploymentConfigSpec = Field(default_factory=DeploymentConfigSpec)


__all__ = [
    "DeploymentStrategy",
    "DeploymentSpec",
    "Deployment",
    "StatefulSetSpec",
    "StatefulSet",
    "DaemonSetSpec",
    "DaemonSet",
    "DeploymentConfigStrategy",
    "DeploymentConfigSpec",
    "DeploymentConfig",
]
