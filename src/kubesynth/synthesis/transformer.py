"""
Transformer: drives a full synthesis pass over a service model.

Order of work:

1. services are grouped (when a grouping mode is set);
2. every unit (a group, then every ungrouped service, each in sorted order)
   becomes one workload plus its sibling objects;
3. the list passes run: network-mode merge, Services first, deduplication.
"""

import logging

from kubesynth.core.pipeline_runner import PipelineRunner
from kubesynth.exceptions import KubeSynthError
from kubesynth.ir.models import (
    ConvertOptions,
    ServiceConfig,
    ServiceModel,
    VolumeMode,
)
from kubesynth.models.k8s import (
    HorizontalPodAutoscaler,
    KubeObject,
    ObjectMeta,
    PersistentVolumeClaim,
    PodTemplateSpec,
)

from .autoscaler import create_autoscaler, has_autoscaler_labels
from .controller import ControllerAdapter
from .env import env_file_config_maps
from .grouping import group_services, group_workload_name
from .naming import base_labels, format_resource_name, labels_with_networks
from .network_mode import NetworkModeMergePass
from .podspec import (
    PodSpecBuilder,
    add_container,
    set_affinity,
    set_domain_name,
    set_grace_period,
    set_hostname,
    set_image_pull_policy,
    set_init_containers,
    set_ports,
    set_resource_limits,
    set_resource_requests,
    set_restart_policy,
    set_security_context,
    set_service_account,
    set_topology_spread,
    set_volume_mounts,
    set_volumes,
)
from .postprocess import (
    RemoveDuplicatesPass,
    SortServicesFirstPass,
    apply_update_strategy,
)
from .services import create_network_policies, create_services
from .volumes import configure_tmpfs, configure_volumes
from .workloads import POD, build_workload, select_controller, workload_kind

logger = logging.getLogger(__name__)


def default_runner() -> PipelineRunner:
    return PipelineRunner(
        [NetworkModeMergePass(), SortServicesFirstPass(), RemoveDuplicatesPass()]
    )


class Transformer:
    """Turns a service model into an ordered list of platform objects."""

    def __init__(
        self,
        options: ConvertOptions | None = None,
        runner: PipelineRunner | None = None,
        adapter: ControllerAdapter | None = None,
    ) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self.options = options or ConvertOptions()
        self.runner = runner or default_runner()
        self.adapter = adapter or ControllerAdapter()

    def transform(
        self, model: ServiceModel | dict[str, ServiceConfig]
    ) -> list[KubeObject]:
        """
        Synthesize every object for `model`.

        The input is not modified. Errors raised while synthesizing a unit
        carry the originating service name in their context.

        Raises:
            KubeSynthError: on any condition that has no valid output.
        """
        source = model.services if isinstance(model, ServiceModel) else model
        services = {
            name: service.model_copy(deep=True) for name, service in source.items()
        }
        for name, service in services.items():
            if not service.name:
                service.name = name

        self._logger.info(f"Synthesizing objects for {len(services)} service(s)")
        groups = group_services(services, self.options.service_group_mode)

        objects: list[KubeObject] = []
        for gid in sorted(groups):
            members = groups[gid]
            name = group_workload_name(gid, members, self.options.service_group_mode)
            objects.extend(self._synthesize_guarded(name, members, grouped=True))
        for service_name in sorted(services):
            service = services[service_name]
            if service.in_group:
                continue
            name = format_resource_name(service.name)
            objects.extend(self._synthesize_guarded(name, [service], grouped=False))

        if self.options.namespace:
            for obj in objects:
                obj.metadata.namespace = self.options.namespace

        return self.runner.execute(objects, services, self.options)

    # ------------------------------------------------------------------ #
    # Per-unit synthesis
    # ------------------------------------------------------------------ #

    def _synthesize_guarded(
        self, name: str, members: list[ServiceConfig], grouped: bool
    ) -> list[KubeObject]:
        try:
            return self._synthesize_unit(name, members, grouped)
        except KubeSynthError as e:
            e.context.setdefault("service_name", members[0].name)
            self._logger.error(f"Failed to synthesize '{name}': {e}")
            raise

    def _synthesize_unit(
        self, name: str, members: list[ServiceConfig], grouped: bool
    ) -> list[KubeObject]:
        options = self.options
        lead = members[0]
        controller = select_controller(lead, options, grouped)
        kind = workload_kind(controller)

        autoscaler: HorizontalPodAutoscaler | None = None
        for service in members:
            if has_autoscaler_labels(service.labels):
                autoscaler = create_autoscaler(name, kind, service)
                break
        replicas = 0 if autoscaler is not None else lead.replicas

        # Claims of a StatefulSet live in its volume claim templates.
        embed_claims = options.is_stateful and options.volumes != VolumeMode.CONFIG_MAP

        builder = PodSpecBuilder()
        siblings: list[KubeObject] = []
        claims: list[PersistentVolumeClaim] = []
        networks: list[str] = []
        annotations: dict[str, str] = {}

        for service in members:
            volume_set = configure_volumes(name, service, options)
            tmpfs = configure_tmpfs(name, service)
            pod_volumes = volume_set.volumes
            if embed_claims:
                pod_volumes = [
                    v for v in pod_volumes if v.persistent_volume_claim is None
                ]

            builder.apply_all(
                [
                    (add_container, service, options),
                    (set_image_pull_policy, service, None),
                    (set_restart_policy, service, None),
                    (set_security_context, service, None),
                    (set_resource_limits, service, None),
                    (set_resource_requests, service, None),
                    (set_hostname, service, None),
                    (set_domain_name, service, None),
                    (set_grace_period, service, None),
                    (set_service_account, service, None),
                    (set_topology_spread, service, name),
                    (set_affinity, service, None),
                    (set_init_containers, service, None),
                    (set_volume_mounts, service, volume_set.mounts),
                    (set_volumes, service, pod_volumes),
                    (set_volume_mounts, service, tmpfs.mounts),
                    (set_volumes, service, tmpfs.volumes),
                    (set_ports, service, None),
                ]
            )

            siblings.extend(env_file_config_maps(service))
            siblings.extend(volume_set.config_maps)
            if embed_claims:
                claims.extend(volume_set.claims)
            else:
                siblings.extend(volume_set.claims)
            siblings.extend(create_services(name, service, options))
            siblings.extend(create_network_policies(service, options))

            for network in service.networks:
                if network not in networks:
                    networks.append(network)
            annotations.update(service.annotations)

        pod_spec = builder.build()
        if controller != POD and pod_spec.restart_policy not in (None, "Always"):
            self._logger.warning(
                f"Restart policy '{pod_spec.restart_policy}' is not supported by "
                f"{kind} '{name}'; using 'Always'"
            )
            pod_spec.restart_policy = "Always"

        workload = build_workload(controller, name, lead, replicas)
        template_labels = (
            labels_with_networks(name, networks)
            if options.generate_network_policies
            else base_labels(name)
        )

        def fill_template(template: PodTemplateSpec) -> None:
            template.metadata.labels = {
                **(template.metadata.labels or {}),
                **template_labels,
            }
            template.metadata.annotations = dict(annotations) or None
            template.spec = pod_spec

        def fill_metadata(metadata: ObjectMeta) -> None:
            metadata.annotations = dict(annotations) or None

        self.adapter.update(workload, fill_template, fill_metadata)
        for service in members:
            apply_update_strategy(workload, service, options, claims)

        unit: list[KubeObject] = [workload, *siblings]
        if autoscaler is not None:
            unit.append(autoscaler)
        self._logger.debug(f"Unit '{name}' produced {len(unit)} object(s)")
        return unit

