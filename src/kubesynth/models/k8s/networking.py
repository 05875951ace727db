from typing import Literal

from pydantic import Field

from .base import KubeBase, KubeObject, LabelSelector


class ServicePort(KubeBase):
    name: str | None = Field(default=None)
    port: int = Field(..., ge=1, le=65535)
    target_port: int | str | None = Field(default=None)
    protocol: str | None = Field(default=None)
    node_port: int | None = Field(default=None)


class ServiceSpec(KubeBase):
    type: str | None = Field(default=None)
    cluster_ip: str | None = Field(default=None, alias="clusterIP")
    ports: list[ServicePort] = Field(default_factory=list)
    selector: dict[str, str] | None = Field(default=None)


class Service(KubeObject):
    """Network-facing service object."""

    api_version: str = Field(default="v1")
    kind: Literal["Service"] = Field(default="Service")
    spec: ServiceSpec = Field(default_factory=ServiceSpec)


class NetworkPolicyPeer(KubeBase):
    pod_selector: LabelSelector | None = Field(default=None)


class NetworkPolicyIngressRule(KubeBase):
    from_: list[NetworkPolicyPeer] | None = Field(default=None, alias="from")


class NetworkPolicySpec(KubeBase):
    pod_selector: LabelSelector = Field(default_factory=LabelSelector)
    ingress: list[NetworkPolicyIngressRule] | None = Field(default=None)


class NetworkPolicy(KubeObject):
    api_version: str = Field(default="networking.k8s.io/v1")
    kind: Literal["NetworkPolicy"] = Field(default="NetworkPolicy")
    spec: NetworkPolicySpec = Field(default_factory=NetworkPolicySpec)


__all__ = [
    "ServicePort",
    "ServiceSpec",
    "Service",
    "NetworkPolicyPeer",
    "NetworkPolicyIngressRule",
    "NetworkPolicySpec",
    "NetworkPolicy",
]
