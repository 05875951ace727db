from __future__ import annotations

"""
models.py – Service model (IR)
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Normalized, in-memory description of application services consumed by the
synthesis pass, plus the options record that steers it.
"""

from enum import Enum
from typing import Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

SCHEMA_VERSION: str = "1.0.0"

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Controller(str, Enum):
    """Workload controller requested for every service."""

    AUTO = ""
    DEPLOYMENT = "deployment"
    STATEFULSET = "statefulset"
    DAEMONSET = "daemonset"
    DEPLOYMENTCONFIG = "deploymentconfig"


class GroupMode(str, Enum):
    """How services are folded into shared workloads."""

    NONE = ""
    LABEL = "label"
    VOLUME = "volume"


class VolumeMode(str, Enum):
    """How declared volumes are materialized."""

    PERSISTENT_VOLUME_CLAIM = "persistentVolumeClaim"
    EMPTY_DIR = "emptyDir"
    HOST_PATH = "hostPath"
    CONFIG_MAP = "configMap"


class ServiceType(str, Enum):
    """Kind of network-facing Service emitted for a service."""

    CLUSTER_IP = "ClusterIP"
    NODE_PORT = "NodePort"
    LOAD_BALANCER = "LoadBalancer"
    HEADLESS = "Headless"
    NONE = "None"


# ---------------------------------------------------------------------------
# Core building blocks
# ---------------------------------------------------------------------------


class Port(BaseModel):
    """Port published by a service container."""

    container_port: int = Field(
        ..., ge=1, le=65535, description="Port the container listens on."
    )
    host_port: int = Field(
        0,
        ge=0,
        le=65535,
        description="Published port; 0 means same as the container port.",
    )
    protocol: str = Field("TCP", description="TCP, UDP or SCTP.")
    host_ip: str | None = Field(None, description="Host address to bind.")

    model_config = ConfigDict(extra="forbid")

    @field_validator("protocol")
    @classmethod
    def _upper_protocol(cls, v: str) -> str:
        v = (v or "TCP").upper()
        if v not in {"TCP", "UDP", "SCTP"}:
            raise ValueError(f"Unsupported protocol '{v}'")
        return v

    @property
    def id(self) -> str:
        """Identity used to drop repeated container ports."""
        return f"{self.container_port}/{self.protocol}"


class HealthCheck(BaseModel):
    """Liveness or readiness check of a service."""

    test: list[str] = Field(
        default_factory=list, description="Command run inside the container."
    )
    http_path: str = Field("", description="HTTP GET path.")
    http_port: int = Field(0, ge=0, description="HTTP GET port.")
    tcp_port: int = Field(0, ge=0, description="TCP socket port.")
    timeout: int = Field(0, ge=0, description="Probe timeout in seconds.")
    interval: int = Field(0, ge=0, description="Probe period in seconds.")
    retries: int = Field(0, ge=0, description="Failure threshold.")
    start_period: int = Field(0, ge=0, description="Initial delay in seconds.")
    disable: bool = Field(False, description="Check explicitly disabled.")

    model_config = ConfigDict(extra="forbid")

    def is_unset(self) -> bool:
        """True when no field differs from its default."""
        return self == HealthCheck()


class HealthChecks(BaseModel):
    liveness: HealthCheck = Field(default_factory=HealthCheck)
    readiness: HealthCheck = Field(default_factory=HealthCheck)

    model_config = ConfigDict(extra="forbid")


class EnvVar(BaseModel):
    """Literal or config-map-sourced environment variable."""

    name: str = Field(..., min_length=1, description="Variable name.")
    value: str | None = Field(None, description="Literal value.")
    config_map: str | None = Field(
        None, description="Existing ConfigMap the value is read from."
    )
    config_map_key: str | None = Field(
        None, description="Key inside `config_map`; defaults to `name`."
    )

    model_config = ConfigDict(extra="forbid")


class EnvFile(BaseModel):
    """Env file referenced by a service, with its already-read values."""

    path: str = Field(..., min_length=1, description="Path as declared.")
    values: dict[str, str] | None = Field(
        None,
        description="Parsed key/value pairs; None refers to an existing ConfigMap.",
    )

    model_config = ConfigDict(extra="forbid")


class VolumeSpec(BaseModel):
    """Declared volume of a service."""

    volume_name: str | None = Field(
        None, description="Named volume; anonymous and bind mounts leave it empty."
    )
    host: str | None = Field(None, description="Host path for bind mounts.")
    container: str = Field(..., min_length=1, description="Mount path.")
    mode: str = Field("", description="Access token: ro, rw, rox, rwx, rwop, rwo.")
    size: str | None = Field(None, description="Requested claim size.")
    storage_class: str | None = Field(None, description="Claim storage class.")
    selector_value: str | None = Field(
        None, description="Value of the claim selector label."
    )

    model_config = ConfigDict(extra="forbid")

    @property
    def read_only(self) -> bool:
        return self.mode in ("ro", "rox")


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ServiceConfig(BaseModel):
    """Per-service intermediate representation."""

    name: str = Field("", description="Service name; filled from the model key.")
    container_name: str = Field("", description="Explicit container name.")
    image: str = Field("", description="Image reference.")
    command: list[str] = Field(default_factory=list)
    args: list[str] = Field(default_factory=list)
    working_dir: str = Field("")
    stdin: bool = Field(False)
    tty: bool = Field(False)

    environment: list[EnvVar] = Field(default_factory=list)
    env_files: list[EnvFile] = Field(default_factory=list)
    ports: list[Port] = Field(default_factory=list)
    health_checks: HealthChecks = Field(default_factory=HealthChecks)

    cpu_limit: int = Field(0, ge=0, description="CPU limit in millicores.")
    cpu_reservation: int = Field(0, ge=0, description="CPU request in millicores.")
    mem_limit: int = Field(0, ge=0, description="Memory limit in bytes.")
    mem_reservation: int = Field(0, ge=0, description="Memory request in bytes.")

    privileged: bool = Field(False)
    user: str = Field("", description="UID or UID:GID.")
    group_add: list[int] = Field(default_factory=list)
    fs_group: int = Field(0, ge=0)
    read_only: bool = Field(False, description="Read-only root filesystem.")
    cap_add: list[str] = Field(default_factory=list)
    cap_drop: list[str] = Field(default_factory=list)
    pid: str = Field("")

    volumes: list[VolumeSpec] = Field(default_factory=list)
    vol_list: list[str] = Field(
        default_factory=list,
        description="Declared mount identifiers, in declaration order.",
    )
    tmpfs: list[str] = Field(default_factory=list)

    restart: str = Field("", description="Restart policy token.")
    network_mode: str = Field("")
    networks: list[str] = Field(default_factory=list)

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    deploy_labels: dict[str, str] = Field(default_factory=dict)

    replicas: int = Field(1, ge=0)
    in_group: bool = Field(False)

    service_type: ServiceType = Field(ServiceType.CLUSTER_IP)
    node_port: int = Field(0, ge=0)

    image_pull_policy: str = Field("")
    image_pull_secret: str = Field("")
    hostname: str = Field("")
    domain_name: str = Field("")
    stop_grace_period: str = Field("")

    placement_constraints: list[str] = Field(default_factory=list)
    placement_preferences: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    # ----- validators --------------------------------------------------------
    @field_validator("env_files", mode="before")
    @classmethod
    def _env_file_paths(cls, v: object) -> object:
        if isinstance(v, list):
            return [{"path": item} if isinstance(item, str) else item for item in v]
        return v

    @model_validator(mode="after")
    def _vol_list_defaults(self) -> Self:
        if self.volumes and not self.vol_list:
            self.vol_list = [
                ":".join(p for p in (v.host or v.volume_name, v.container, v.mode) if p)
                for v in self.volumes
            ]
        return self


class ConvertOptions(BaseModel):
    """Options record steering a synthesis pass."""

    controller: Controller = Field(Controller.AUTO)
    service_group_mode: GroupMode = Field(GroupMode.NONE)
    generate_network_policies: bool = Field(False)
    volumes: VolumeMode = Field(VolumeMode.PERSISTENT_VOLUME_CLAIM)
    pvc_request_size: str = Field("100Mi", min_length=1)
    namespace: str = Field("")
    generate_json: bool = Field(False)
    yaml_indent: int = Field(2, ge=1, le=8)

    model_config = ConfigDict(extra="forbid")

    @field_validator("controller", mode="before")
    @classmethod
    def _lower_controller(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v

    @property
    def is_stateful(self) -> bool:
        return self.controller == Controller.STATEFULSET


class ServiceModel(BaseModel):
    """Root container holding every service of an application."""

    schema_version: str = Field(
        SCHEMA_VERSION,
        frozen=True,
        description="IR schema semantic version for compatibility checks.",
    )
    services: dict[str, ServiceConfig] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _fill_names(self) -> Self:
        for key, service in self.services.items():
            if not service.name:
                service.name = key
        return self


__all__ = [
    "SCHEMA_VERSION",
    "Controller",
    "GroupMode",
    "VolumeMode",
    "ServiceType",
    "Port",
    "HealthCheck",
    "HealthChecks",
    "EnvVar",
    "EnvFile",
    "VolumeSpec",
    "ServiceConfig",
    "ConvertOptions",
    "ServiceModel",
]
