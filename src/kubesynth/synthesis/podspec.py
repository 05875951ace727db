"""
Pod specification builder.

A pod spec is assembled by applying an ordered list of steps to a
zero-valued `PodSpec`. Every step has the same shape::

    step(pod_spec, service, setting) -> pod_spec

and writes only its own concern. `setting` carries the step's external
input (volumes to add, the unit name, the convert options) and is ignored by
steps that need none. Steps writing container fields target the service's
own container, found by name, so several services can share one pod.
"""

import logging
import re
from collections.abc import Callable, Iterable
from typing import Any

from kubesynth.exceptions import HealthCheckError, UnknownPolicyError
from kubesynth.ir.models import HealthCheck, ServiceConfig
from kubesynth.models.k8s import (
    Affinity,
    Capabilities,
    Container,
    ContainerPort,
    ExecAction,
    HTTPGetAction,
    LabelSelector,
    LocalObjectReference,
    NodeAffinity,
    NodeSelector,
    NodeSelectorRequirement,
    NodeSelectorTerm,
    PodSecurityContext,
    PodSpec,
    Probe,
    ResourceRequirements,
    SecurityContext,
    TCPSocketAction,
    TopologySpreadConstraint,
    Volume,
    VolumeMount,
)

from .env import config_envs
from .naming import (
    DEPLOY_LABEL_EPHEMERAL_LIMIT,
    DEPLOY_LABEL_EPHEMERAL_REQUEST,
    LABEL_INIT_COMMAND,
    LABEL_INIT_IMAGE,
    LABEL_INIT_NAME,
    LABEL_SERVICE_ACCOUNT,
    base_labels,
    container_name,
    cpu_quantity,
    interpolate_args,
    is_quantity,
    memory_quantity,
    parse_duration,
)

logger = logging.getLogger(__name__)

PodSpecStep = Callable[[PodSpec, ServiceConfig, Any], PodSpec]

DEFAULT_INIT_CONTAINER_NAME = "init-service"

_RESTART_POLICIES: dict[str, str] = {
    "": "Always",
    "always": "Always",
    "any": "Always",
    "no": "Never",
    "none": "Never",
    "on-failure": "OnFailure",
}
_PULL_POLICIES = {"Always", "Never", "IfNotPresent"}

# Placement constraint keys and the node labels they select on.
_CONSTRAINT_KEYS: dict[str, str] = {
    "node.hostname": "kubernetes.io/hostname",
    "node.platform.os": "kubernetes.io/os",
    "engine.labels.operatingsystem": "kubernetes.io/os",
    "node.platform.arch": "kubernetes.io/arch",
}
_NODE_LABEL_PREFIX = "node.labels."
_CONSTRAINT = re.compile(r"^\s*([^=!\s]+)\s*(==|!=)\s*(.+?)\s*$")


# ---------------------------------------------------------------------------
# Policy and directive translation
# ---------------------------------------------------------------------------


def restart_policy(service_name: str, token: str) -> str:
    """Map a restart token onto a pod restart policy."""
    try:
        return _RESTART_POLICIES[token]
    except KeyError:
        raise UnknownPolicyError(
            f"Unknown restart policy '{token}' for service '{service_name}'",
            service_name=service_name,
            policy_field="restart",
            value=token,
        ) from None


def image_pull_policy(service_name: str, token: str) -> str | None:
    """Validate an image pull policy; an empty token means unset."""
    if not token:
        return None
    if token not in _PULL_POLICIES:
        raise UnknownPolicyError(
            f"Unknown image-pull-policy '{token}' for service '{service_name}'",
            service_name=service_name,
            policy_field="image_pull_policy",
            value=token,
        )
    return token


def parse_user(directive: str, service_name: str) -> tuple[int | None, int | None]:
    """
    Parse a `UID` or `UID:GID` user directive.

    Malformed segments are dropped with a warning; a directive with more
    than two segments is dropped whole.
    """
    parts = directive.split(":")
    if len(parts) > 2:
        logger.warning(
            f"Ignoring ill-formed user directive '{directive}' of service "
            f"'{service_name}'. Must be in format UID or UID:GID."
        )
        return None, None

    def _numeric(part: str, what: str) -> int | None:
        if part.isascii() and part.isdigit():
            return int(part)
        logger.warning(
            f"Ignoring {what} '{part}' in user directive of service "
            f"'{service_name}'. It must be numeric."
        )
        return None

    uid = _numeric(parts[0], "user")
    gid = _numeric(parts[1], "group") if len(parts) == 2 else None
    return uid, gid


def configure_probe(check: HealthCheck, service_name: str) -> Probe | None:
    """
    Translate a health check into a probe.

    Returns None for a disabled or unset check. Otherwise exactly one handler
    is set, by precedence exec > httpGet > tcpSocket.

    Raises:
        HealthCheckError: if the check has no command, HTTP target or TCP port.
    """
    if check.disable or check.is_unset():
        return None

    if check.test:
        probe = Probe(exec=ExecAction(command=list(check.test)))
    elif check.http_path and check.http_port:
        probe = Probe(
            http_get=HTTPGetAction(path=check.http_path, port=check.http_port)
        )
    elif check.tcp_port:
        probe = Probe(tcp_socket=TCPSocketAction(port=check.tcp_port))
    else:
        raise HealthCheckError(
            "Health check must contain a command, an HTTP path and port, "
            "or a TCP port",
            service_name=service_name,
        )

    probe.timeout_seconds = check.timeout or None
    probe.period_seconds = check.interval or None
    probe.failure_threshold = check.retries or None
    probe.initial_delay_seconds = check.start_period or None
    return probe


def parse_command_list(line: str) -> list[str]:
    """
    Split a command given in a label.

    `[bundle, exec, thin]` and `"a", "b"` become one entry per element;
    a string with no comma stays a single entry.
    """
    if not line:
        return []
    if "," not in line:
        return [line]
    inner = line.strip("[]").strip()
    return [part.strip().strip("\"' ") for part in inner.split(",")]


def _own_container(pod_spec: PodSpec, service: ServiceConfig) -> Container | None:
    container = pod_spec.container(container_name(service))
    if container is None:
        logger.warning(
            f"No container '{container_name(service)}' in pod spec for "
            f"service '{service.name}'"
        )
    return container


def _resource_list(
    service: ServiceConfig, memory: int, cpu: int, ephemeral_label: str
) -> dict[str, str]:
    resources: dict[str, str] = {}
    if memory:
        resources["memory"] = memory_quantity(memory)
    if cpu:
        resources["cpu"] = cpu_quantity(cpu)
    ephemeral = service.deploy_labels.get(ephemeral_label, "").strip()
    if ephemeral:
        if is_quantity(ephemeral):
            resources["ephemeral-storage"] = ephemeral
        else:
            logger.warning(
                f"Ignoring invalid quantity '{ephemeral}' in '{ephemeral_label}' "
                f"of service '{service.name}'"
            )
    return resources


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def add_container(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    """Append the service's container and its image pull secret."""
    name = container_name(service)
    envs, env_from = config_envs(service)

    pod_spec.containers.append(
        Container(
            name=name,
            image=service.image or name,
            env=envs or None,
            env_from=env_from or None,
            command=list(service.command) or None,
            args=interpolate_args(service.args) or None,
            working_dir=service.working_dir or None,
            stdin=service.stdin or None,
            tty=service.tty or None,
            liveness_probe=configure_probe(
                service.health_checks.liveness, service.name
            ),
            readiness_probe=configure_probe(
                service.health_checks.readiness, service.name
            ),
        )
    )

    if service.image_pull_secret:
        secrets = pod_spec.image_pull_secrets or []
        if all(s.name != service.image_pull_secret for s in secrets):
            secrets.append(LocalObjectReference(name=service.image_pull_secret))
        pod_spec.image_pull_secrets = secrets
    return pod_spec


def set_resource_limits(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    limits = _resource_list(
        service, service.mem_limit, service.cpu_limit, DEPLOY_LABEL_EPHEMERAL_LIMIT
    )
    container = _own_container(pod_spec, service) if limits else None
    if container is not None:
        container.resources = container.resources or ResourceRequirements()
        container.resources.limits = limits
    return pod_spec


def set_resource_requests(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    requests = _resource_list(
        service,
        service.mem_reservation,
        service.cpu_reservation,
        DEPLOY_LABEL_EPHEMERAL_REQUEST,
    )
    container = _own_container(pod_spec, service) if requests else None
    if container is not None:
        container.resources = container.resources or ResourceRequirements()
        container.resources.requests = requests
    return pod_spec


def set_security_context(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    """Container and pod security contexts; all-default contexts stay unset."""
    pod_context = PodSecurityContext()
    if service.pid:
        if service.pid == "host":
            pod_spec.host_pid = True
        else:
            logger.warning(
                f"Ignoring PID key for service '{service.name}'. "
                f"Invalid value '{service.pid}'."
            )
    if service.group_add:
        pod_context.supplemental_groups = list(service.group_add)
    if service.fs_group:
        pod_context.fs_group = service.fs_group

    context = SecurityContext()
    if service.privileged:
        context.privileged = True
    if service.user:
        context.run_as_user, context.run_as_group = parse_user(
            service.user, service.name
        )
    if service.cap_add or service.cap_drop:
        context.capabilities = Capabilities(
            add=list(service.cap_add) or None, drop=list(service.cap_drop) or None
        )
    if service.read_only:
        context.read_only_root_filesystem = True

    if not context.is_empty():
        container = _own_container(pod_spec, service)
        if container is not None:
            container.security_context = context
    if not pod_context.is_empty():
        pod_spec.security_context = pod_context
    return pod_spec


def set_volumes(
    pod_spec: PodSpec, service: ServiceConfig, setting: list[Volume] | None
) -> PodSpec:
    """Union `setting` into the pod volumes, keyed by volume name."""
    current = pod_spec.volumes or []
    names = {v.name for v in current}
    for volume in setting or []:
        if volume.name not in names:
            current.append(volume)
            names.add(volume.name)
    pod_spec.volumes = current or None
    return pod_spec


def set_volume_mounts(
    pod_spec: PodSpec, service: ServiceConfig, setting: list[VolumeMount] | None
) -> PodSpec:
    """Union `setting` into the container's mounts, keyed by mount path."""
    if not setting:
        return pod_spec
    container = _own_container(pod_spec, service)
    if container is None:
        return pod_spec
    current = container.volume_mounts or []
    paths = {m.mount_path for m in current}
    for mount in setting:
        if mount.mount_path not in paths:
            current.append(mount)
            paths.add(mount.mount_path)
    container.volume_mounts = current or None
    return pod_spec


def set_ports(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    """Write container ports; a repeated (port, protocol) pair is kept once."""
    ports: list[ContainerPort] = []
    seen: set[str] = set()
    for port in service.ports:
        if port.id in seen:
            continue
        seen.add(port.id)
        ports.append(
            ContainerPort(
                container_port=port.container_port,
                protocol=port.protocol,
                host_ip=port.host_ip,
            )
        )

    name = container_name(service)
    for container in pod_spec.containers:
        if container.name == name:
            container.ports = ports or None
    return pod_spec


def set_image_pull_policy(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    policy = image_pull_policy(service.name, service.image_pull_policy)
    if policy:
        container = _own_container(pod_spec, service)
        if container is not None:
            container.image_pull_policy = policy
    return pod_spec


def set_restart_policy(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    pod_spec.restart_policy = restart_policy(service.name, service.restart)
    return pod_spec


def set_hostname(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    if service.hostname:
        pod_spec.hostname = service.hostname
    return pod_spec


def set_domain_name(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    if service.domain_name:
        pod_spec.subdomain = service.domain_name
    return pod_spec


def set_grace_period(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    if not service.stop_grace_period:
        return pod_spec
    try:
        pod_spec.termination_grace_period_seconds = parse_duration(
            service.stop_grace_period
        )
    except ValueError:
        logger.warning(
            f"Failed to parse duration '{service.stop_grace_period}' "
            f"for service '{service.name}'"
        )
    return pod_spec


def set_service_account(
    pod_spec: PodSpec, service: ServiceConfig, setting: str | None = None
) -> PodSpec:
    """Service account from the service's label, else from `setting`."""
    account = service.labels.get(LABEL_SERVICE_ACCOUNT) or setting
    if account:
        pod_spec.service_account_name = account
    return pod_spec


def set_topology_spread(
    pod_spec: PodSpec, service: ServiceConfig, setting: str | None = None
) -> PodSpec:
    """
    One spread constraint per placement preference, highest skew first.

    `setting` is the workload name whose pods the constraints select.
    """
    keys = []
    for preference in service.placement_preferences:
        key = preference.split(":", 1)[1] if ":" in preference else preference
        key = key.strip()
        keys.append(_CONSTRAINT_KEYS.get(key, key.removeprefix(_NODE_LABEL_PREFIX)))
    if not keys:
        return pod_spec

    selector = LabelSelector(match_labels=base_labels(setting or service.name))
    pod_spec.topology_spread_constraints = [
        TopologySpreadConstraint(
            max_skew=len(keys) - i,
            topology_key=key,
            when_unsatisfiable="ScheduleAnyway",
            label_selector=selector,
        )
        for i, key in enumerate(keys)
    ]
    return pod_spec


def set_affinity(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    """Required node affinity from `==` / `!=` placement constraints."""
    requirements: list[NodeSelectorRequirement] = []
    for constraint in service.placement_constraints:
        match = _CONSTRAINT.match(constraint)
        if match is None:
            logger.warning(
                f"Ignoring malformed placement constraint '{constraint}' "
                f"of service '{service.name}'"
            )
            continue
        key, op, value = match.groups()
        if key in _CONSTRAINT_KEYS:
            node_label = _CONSTRAINT_KEYS[key]
        elif key.startswith(_NODE_LABEL_PREFIX):
            node_label = key[len(_NODE_LABEL_PREFIX) :]
        else:
            logger.warning(
                f"Ignoring unsupported placement constraint '{constraint}' "
                f"of service '{service.name}'"
            )
            continue
        requirements.append(
            NodeSelectorRequirement(
                key=node_label,
                operator="In" if op == "==" else "NotIn",
                values=[value],
            )
        )

    if requirements:
        pod_spec.affinity = Affinity(
            node_affinity=NodeAffinity(
                required_during_scheduling_ignored_during_execution=NodeSelector(
                    node_selector_terms=[
                        NodeSelectorTerm(match_expressions=requirements)
                    ]
                )
            )
        )
    return pod_spec


def set_init_containers(
    pod_spec: PodSpec, service: ServiceConfig, setting: Any = None
) -> PodSpec:
    image = service.labels.get(LABEL_INIT_IMAGE, "")
    if not image:
        return pod_spec
    init = Container(
        name=service.labels.get(LABEL_INIT_NAME) or DEFAULT_INIT_CONTAINER_NAME,
        image=image,
        command=parse_command_list(service.labels.get(LABEL_INIT_COMMAND, "")) or None,
    )
    pod_spec.init_containers = (pod_spec.init_containers or []) + [init]
    return pod_spec


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class PodSpecBuilder:
    """Applies pod spec steps, in order, to one exclusively owned `PodSpec`."""

    def __init__(self, pod_spec: PodSpec | None = None) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self._pod_spec = pod_spec if pod_spec is not None else PodSpec()

    def apply(
        self, step: PodSpecStep, service: ServiceConfig, setting: Any = None
    ) -> "PodSpecBuilder":
        self._logger.debug(f"Applying {step.__name__} for service '{service.name}'")
        self._pod_spec = step(self._pod_spec, service, setting)
        return self

    def apply_all(
        self, steps: Iterable[tuple[PodSpecStep, ServiceConfig, Any]]
    ) -> "PodSpecBuilder":
        for step, service, setting in steps:
            self.apply(step, service, setting)
        return self

    def build(self) -> PodSpec:
        return self._pod_spec
