"""Folding several services into one shared workload."""

import logging

from kubesynth.ir.models import GroupMode, ServiceConfig

from .naming import LABEL_SERVICE_GROUP, format_resource_name

logger = logging.getLogger(__name__)


def group_id(service: ServiceConfig, mode: GroupMode) -> str:
    """
    Group a service belongs to; `""` means ungrouped.

    In `label` mode the id is the value of the `kompose.service.group`
    label, in `volume` mode the concatenation of the service's declared
    mount identifiers.
    """
    if mode == GroupMode.LABEL:
        return service.labels.get(LABEL_SERVICE_GROUP, "")
    if mode == GroupMode.VOLUME:
        return "".join(service.vol_list)
    return ""


def group_services(
    services: dict[str, ServiceConfig], mode: GroupMode
) -> dict[str, list[ServiceConfig]]:
    """
    Partition grouped services by group id.

    Services are visited in sorted name order, so member lists are
    deterministic. Every grouped service gets its `name` set from its key
    and `in_group` flagged; ungrouped services are left untouched.
    """
    groups: dict[str, list[ServiceConfig]] = {}
    if mode == GroupMode.NONE:
        return groups

    for name in sorted(services):
        service = services[name]
        gid = group_id(service, mode)
        if not gid:
            continue
        service.name = name
        service.in_group = True
        groups.setdefault(gid, []).append(service)

    for gid, members in groups.items():
        logger.info(f"Group '{gid}': {', '.join(s.name for s in members)}")
    return groups


def group_workload_name(
    gid: str, members: list[ServiceConfig], mode: GroupMode
) -> str:
    """Name of the workload hosting a group's containers."""
    if mode == GroupMode.VOLUME:
        return format_resource_name(members[0].name)
    return format_resource_name(gid)
