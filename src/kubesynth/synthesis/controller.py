"""
Uniform access to the pod template and metadata of every workload variant.

The adapter is the only writer of a workload's template and metadata. It
dispatches on the object's class through a closed table; extending the
variant set means registering one more entry.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from kubesynth.exceptions import UnsupportedVariantError
from kubesynth.models.k8s import (
    DaemonSet,
    Deployment,
    DeploymentConfig,
    KubeObject,
    ObjectMeta,
    Pod,
    PodTemplateSpec,
    StatefulSet,
    TemplateMeta,
)

logger = logging.getLogger(__name__)

TemplateFiller = Callable[[PodTemplateSpec], None]
MetadataFiller = Callable[[ObjectMeta], None]


@dataclass(frozen=True)
class VariantAccessors:
    """How to reach the template and metadata of one workload class."""

    template: Callable[[KubeObject], PodTemplateSpec]
    metadata: Callable[[KubeObject], ObjectMeta]
    # Set for variants whose template is a temporary view of the object.
    write_back: Callable[[KubeObject, PodTemplateSpec], None] | None = None


def _spec_template(obj: KubeObject) -> PodTemplateSpec:
    return obj.spec.template  # type: ignore[attr-defined]


def _object_metadata(obj: KubeObject) -> ObjectMeta:
    return obj.metadata


def _pod_template(pod: KubeObject) -> PodTemplateSpec:
    return PodTemplateSpec(
        metadata=TemplateMeta(
            labels=dict(pod.metadata.labels or {}) or None,
            annotations=dict(pod.metadata.annotations or {}) or None,
        ),
        spec=pod.spec,  # type: ignore[attr-defined]
    )


def _pod_write_back(pod: KubeObject, template: PodTemplateSpec) -> None:
    pod.spec = template.spec  # type: ignore[attr-defined]
    labels = {**(pod.metadata.labels or {}), **(template.metadata.labels or {})}
    pod.metadata.labels = labels or None


_TEMPLATED = VariantAccessors(template=_spec_template, metadata=_object_metadata)

DEFAULT_VARIANTS: dict[type[KubeObject], VariantAccessors] = {
    Deployment: _TEMPLATED,
    StatefulSet: _TEMPLATED,
    DaemonSet: _TEMPLATED,
    DeploymentConfig: _TEMPLATED,
    Pod: VariantAccessors(
        template=_pod_template, metadata=_object_metadata, write_back=_pod_write_back
    ),
}


class ControllerAdapter:
    """Apply template and metadata fillers to any supported workload."""

    def __init__(
        self, variants: dict[type[KubeObject], VariantAccessors] | None = None
    ) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self._variants = dict(DEFAULT_VARIANTS if variants is None else variants)

    def register(self, cls: type[KubeObject], accessors: VariantAccessors) -> None:
        self._variants[cls] = accessors

    def is_supported(self, obj: object) -> bool:
        return type(obj) in self._variants

    def update(
        self,
        obj: KubeObject,
        fill_template: TemplateFiller,
        fill_metadata: MetadataFiller,
    ) -> None:
        """
        Fill the pod template and the object metadata of `obj`.

        Raises:
            UnsupportedVariantError: if `obj` is not a known workload class.
        """
        accessors = self._variants.get(type(obj))
        if accessors is None:
            kind = getattr(obj, "kind", type(obj).__name__)
            raise UnsupportedVariantError(
                f"Object of kind '{kind}' is not a supported workload", kind=kind
            )

        template = accessors.template(obj)
        fill_template(template)
        if accessors.write_back is not None:
            accessors.write_back(obj, template)
        fill_metadata(accessors.metadata(obj))
        self._logger.debug(f"Updated {obj.kind} '{obj.metadata.name}'")
