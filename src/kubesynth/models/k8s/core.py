"""Pod-level structures of the core/v1 API group."""

from typing import Literal

from pydantic import Field

from .base import KubeBase, KubeObject, LabelSelector, ObjectMeta, TemplateMeta


class ConfigMapKeySelector(KubeBase):
    name: str
    key: str


class EnvVarSource(KubeBase):
    config_map_key_ref: ConfigMapKeySelector | None = Field(default=None)


class EnvVar(KubeBase):
    name: str = Field(..., min_length=1)
    value: str | None = Field(default=None)
    value_from: EnvVarSource | None = Field(default=None)


class LocalObjectReference(KubeBase):
    name: str = Field(..., min_length=1)


class EnvFromSource(KubeBase):
    config_map_ref: LocalObjectReference | None = Field(default=None)


class ContainerPort(KubeBase):
    container_port: int = Field(..., ge=1, le=65535)
    host_ip: str | None = Field(default=None, alias="hostIP")
    host_port: int | None = Field(default=None)
    protocol: str | None = Field(default=None)
    name: str | None = Field(default=None)


class ExecAction(KubeBase):
    command: list[str]


class HTTPGetAction(KubeBase):
    path: str
    port: int | str


class TCPSocketAction(KubeBase):
    port: int | str


class Probe(KubeBase):
    """Container probe; exactly one handler is expected to be set."""

    exec: ExecAction | None = Field(default=None)
    http_get: HTTPGetAction | None = Field(default=None)
    tcp_socket: TCPSocketAction | None = Field(default=None)
    timeout_seconds: int | None = Field(default=None)
    period_seconds: int | None = Field(default=None)
    failure_threshold: int | None = Field(default=None)
    initial_delay_seconds: int | None = Field(default=None)


class Capabilities(KubeBase):
    add: list[str] | None = Field(default=None)
    drop: list[str] | None = Field(default=None)


class SecurityContext(KubeBase):
    """Container-level security context."""

    privileged: bool | None = Field(default=None)
    run_as_user: int | None = Field(default=None)
    run_as_group: int | None = Field(default=None)
    capabilities: Capabilities | None = Field(default=None)
    read_only_root_filesystem: bool | None = Field(default=None)

    def is_empty(self) -> bool:
        return self == SecurityContext()


class PodSecurityContext(KubeBase):
    """Pod-level security context."""

    supplemental_groups: list[int] | None = Field(default=None)
    fs_group: int | None = Field(default=None)

    def is_empty(self) -> bool:
        return self == PodSecurityContext()


class ResourceRequirements(KubeBase):
    limits: dict[str, str] | None = Field(default=None)
    requests: dict[str, str] | None = Field(default=None)


class VolumeMount(KubeBase):
    name: str = Field(..., min_length=1)
    mount_path: str = Field(..., min_length=1)
    read_only: bool | None = Field(default=None)
    sub_path: str | None = Field(default=None)


class PersistentVolumeClaimVolumeSource(KubeBase):
    claim_name: str
    read_only: bool | None = Field(default=None)


class KeyToPath(KubeBase):
    key: str
    path: str


class ConfigMapVolumeSource(KubeBase):
    name: str
    items: list[KeyToPath] | None = Field(default=None)


class EmptyDirVolumeSource(KubeBase):
    medium: str | None = Field(default=None)


class HostPathVolumeSource(KubeBase):
    path: str


class Volume(KubeBase):
    """Pod volume; exactly one source is expected to be set."""

    name: str = Field(..., min_length=1)
    persistent_volume_claim: PersistentVolumeClaimVolumeSource | None = Field(
        default=None
    )
    config_map: ConfigMapVolumeSource | None = Field(default=None)
    empty_dir: EmptyDirVolumeSource | None = Field(default=None)
    host_path: HostPathVolumeSource | None = Field(default=None)


class Container(KubeBase):
    name: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    command: list[str] | None = Field(default=None)
    args: list[str] | None = Field(default=None)
    working_dir: str | None = Field(default=None)
    env: list[EnvVar] | None = Field(default=None)
    env_from: list[EnvFromSource] | None = Field(default=None)
    ports: list[ContainerPort] | None = Field(default=None)
    resources: ResourceRequirements | None = Field(default=None)
    volume_mounts: list[VolumeMount] | None = Field(default=None)
    liveness_probe: Probe | None = Field(default=None)
    readiness_probe: Probe | None = Field(default=None)
    security_context: SecurityContext | None = Field(default=None)
    image_pull_policy: str | None = Field(default=None)
    stdin: bool | None = Field(default=None)
    tty: bool | None = Field(default=None)


class NodeSelectorRequirement(KubeBase):
    key: str
    operator: Literal["In", "NotIn", "Exists", "DoesNotExist"]
    values: list[str] | None = Field(default=None)


class NodeSelectorTerm(KubeBase):
    match_expressions: list[NodeSelectorRequirement]


class NodeSelector(KubeBase):
    node_selector_terms: list[NodeSelectorTerm]


class NodeAffinity(KubeBase):
    required_during_scheduling_ignored_during_execution: NodeSelector | None = (
        Field(default=None)
    )


class Affinity(KubeBase):
    node_affinity: NodeAffinity | None = Field(default=None)


class TopologySpreadConstraint(KubeBase):
    max_skew: int = Field(..., ge=1)
    topology_key: str
    when_unsatisfiable: Literal["DoNotSchedule", "ScheduleAnyway"]
    label_selector: LabelSelector | None = Field(default=None)


class PodSpec(KubeBase):
    """
    Pod specification.

    Starts zero-valued and is filled by the pod spec builder's steps; the
    container list keeps insertion order.
    """

    containers: list[Container] = Field(default_factory=list)
    init_containers: list[Container] | None = Field(default=None)
    volumes: list[Volume] | None = Field(default=None)
    restart_policy: str | None = Field(default=None)
    termination_grace_period_seconds: int | None = Field(default=None)
    security_context: PodSecurityContext | None = Field(default=None)
    image_pull_secrets: list[LocalObjectReference] | None = Field(default=None)
    affinity: Affinity | None = Field(default=None)
    topology_spread_constraints: list[TopologySpreadConstraint] | None = Field(
        default=None
    )
    host_pid: bool | None = Field(default=None, alias="hostPID")
    hostname: str | None = Field(default=None)
    subdomain: str | None = Field(default=None)
    service_account_name: str | None = Field(default=None)

    def container(self, name: str) -> Container | None:
        """Return the container called `name`, if any."""
        for c in self.containers:
            if c.name == name:
                return c
        return None


class PodTemplateSpec(KubeBase):
    metadata: TemplateMeta = Field(default_factory=TemplateMeta)
    spec: PodSpec = Field(default_factory=PodSpec)


class Pod(KubeObject):
    """Bare pod: a workload variant without a controller."""

    api_version: str = Field(default="v1")
    kind: Literal["Pod"] = Field(default="Pod")
    spec: PodSpec = Field(default_factory=PodSpec)


__all__ = [
    "ObjectMeta",
    "ConfigMapKeySelector",
    "EnvVarSource",
    "EnvVar",
    "LocalObjectReference",
    "EnvFromSource",
    "ContainerPort",
    "ExecAction",
    "HTTPGetAction",
    "TCPSocketAction",
    "Probe",
    "Capabilities",
    "SecurityContext",
    "PodSecurityContext",
    "ResourceRequirements",
    "VolumeMount",
    "PersistentVolumeClaimVolumeSource",
    "KeyToPath",
    "ConfigMapVolumeSource",
    "EmptyDirVolumeSource",
    "HostPathVolumeSource",
    "Volume",
    "Container",
    "NodeSelectorRequirement",
    "NodeSelectorTerm",
    "NodeSelector",
    "NodeAffinity",
    "Affinity",
    "TopologySpreadConstraint",
    "PodSpec",
    "PodTemplateSpec",
    "Pod",
]
