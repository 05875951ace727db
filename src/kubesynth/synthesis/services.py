"""Service and NetworkPolicy synthesis."""

import logging

from kubesynth.ir.models import ConvertOptions, Port, ServiceConfig, ServiceType
from kubesynth.models.k8s import (
    LabelSelector,
    NetworkPolicy,
    NetworkPolicyIngressRule,
    NetworkPolicyPeer,
    NetworkPolicySpec,
    ObjectMeta,
    Service,
    ServicePort,
    ServiceSpec,
)

from .naming import NETWORK_LABEL_PREFIX, base_labels, format_resource_name

logger = logging.getLogger(__name__)

HEADLESS_PORT_NAME = "headless"
HEADLESS_PORT = 55555
CLUSTER_IP_NONE = "None"


def service_type(service: ServiceConfig, options: ConvertOptions) -> ServiceType:
    """Declared Service type; a StatefulSet always gets a headless Service."""
    if options.is_stateful and service.service_type != ServiceType.HEADLESS:
        logger.debug(f"Service '{service.name}' forced headless for StatefulSet")
        return ServiceType.HEADLESS
    return service.service_type


def service_ports(
    service: ServiceConfig, ports: list[Port] | None = None
) -> list[ServicePort]:
    """
    Service ports for `ports` (default: all ports of `service`).

    A port is named after its published number, or `<number>-<protocol>`
    when that number was already used by another protocol.
    """
    result: list[ServicePort] = []
    seen: set[int] = set()
    for port in service.ports if ports is None else ports:
        number = port.host_port or port.container_port
        name = str(number)
        if number in seen:
            name = f"{number}-{port.protocol.lower()}"
        seen.add(number)
        result.append(
            ServicePort(
                name=name,
                port=number,
                target_port=port.container_port,
                protocol=port.protocol if port.protocol != "TCP" else None,
            )
        )
    return result


def _service(
    name: str, unit_name: str, service: ServiceConfig, spec: ServiceSpec
) -> Service:
    spec.selector = base_labels(unit_name)
    return Service(
        metadata=ObjectMeta(
            name=name,
            labels=base_labels(name),
            annotations=dict(service.annotations) or None,
        ),
        spec=spec,
    )


def create_headless_service(
    name: str, unit_name: str, service: ServiceConfig
) -> Service:
    """Headless Service without ports; carries one placeholder port."""
    spec = ServiceSpec(
        type="ClusterIP",
        cluster_ip=CLUSTER_IP_NONE,
        ports=[ServicePort(name=HEADLESS_PORT_NAME, port=HEADLESS_PORT)],
    )
    return _service(name, unit_name, service, spec)


def create_standard_service(
    name: str, unit_name: str, service: ServiceConfig, kind: ServiceType
) -> Service:
    ports = service_ports(service)
    spec = ServiceSpec(type=kind.value, ports=ports)
    if kind == ServiceType.HEADLESS:
        spec.type = ServiceType.CLUSTER_IP.value
        spec.cluster_ip = CLUSTER_IP_NONE
    elif kind == ServiceType.NODE_PORT and service.node_port:
        for port in spec.ports:
            port.node_port = service.node_port
    return _service(name, unit_name, service, spec)


def create_load_balancer_services(
    name: str, unit_name: str, service: ServiceConfig
) -> list[Service]:
    """
    Load-balanced Services, split by protocol.

    When both TCP and UDP ports are published, `<name>-tcp` and
    `<name>-udp` are emitted; otherwise a single `<name>`.
    """
    tcp = [p for p in service.ports if p.protocol != "UDP"]
    udp = [p for p in service.ports if p.protocol == "UDP"]
    groups = [("tcp", tcp), ("udp", udp)]
    split = bool(tcp) and bool(udp)

    services = []
    for suffix, ports in groups:
        if not ports:
            continue
        spec = ServiceSpec(
            type=ServiceType.LOAD_BALANCER.value,
            ports=service_ports(service, ports),
        )
        object_name = f"{name}-{suffix}" if split else name
        services.append(_service(object_name, unit_name, service, spec))
    return services


def create_services(
    unit_name: str, service: ServiceConfig, options: ConvertOptions
) -> list[Service]:
    """
    Services fronting `service`, whose pods belong to workload `unit_name`.

    No Service is produced for type `None`, nor for a service without ports
    unless it is headless.
    """
    kind = service_type(service, options)
    name = format_resource_name(service.name)

    if kind == ServiceType.NONE:
        return []
    if not service.ports:
        if kind == ServiceType.HEADLESS:
            return [create_headless_service(name, unit_name, service)]
        return []
    if kind == ServiceType.LOAD_BALANCER:
        return create_load_balancer_services(name, unit_name, service)
    return [create_standard_service(name, unit_name, service, kind)]


def create_network_policies(
    service: ServiceConfig, options: ConvertOptions
) -> list[NetworkPolicy]:
    """One policy per attached network admitting traffic from its members."""
    if not options.generate_network_policies:
        return []

    policies = []
    for network in service.networks:
        selector = LabelSelector(
            match_labels={f"{NETWORK_LABEL_PREFIX}{network}": "true"}
        )
        policies.append(
            NetworkPolicy(
                metadata=ObjectMeta(name=format_resource_name(network)),
                spec=NetworkPolicySpec(
                    pod_selector=selector,
                    ingress=[
                        NetworkPolicyIngressRule(
                            from_=[NetworkPolicyPeer(pod_selector=selector)]
                        )
                    ],
                ),
            )
        )
    return policies
