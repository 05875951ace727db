"""Unit tests for the workload controller adapter."""

import pytest

from kubesynth.exceptions import UnsupportedVariantError
from kubesynth.models.k8s import (
    ConfigMap,
    Container,
    DaemonSet,
    Deployment,
    DeploymentConfig,
    ObjectMeta,
    Pod,
    PodTemplateSpec,
    StatefulSet,
)
from kubesynth.synthesis.controller import ControllerAdapter, VariantAccessors

# ---- Fakes / helpers ----


def _fill_template(template: PodTemplateSpec) -> None:
    template.metadata.labels = {"io.kompose.service": "web", "tier": "front"}
    template.spec.containers.append(Container(name="web", image="nginx"))


def _fill_metadata(meta: ObjectMeta) -> None:
    meta.annotations = {"note": "x"}


# ---- Tests ----


class TestControllerAdapter:
    @pytest.mark.parametrize(
        "cls", [Deployment, StatefulSet, DaemonSet, DeploymentConfig]
    )
    def test_templated_variants(self, cls):
        obj = cls(metadata=ObjectMeta(name="web"))
        ControllerAdapter().update(obj, _fill_template, _fill_metadata)
        assert obj.spec.template.spec.containers[0].name == "web"
        assert obj.spec.template.metadata.labels["tier"] == "front"
        assert obj.metadata.annotations == {"note": "x"}

    def test_pod_template_written_back(self):
        pod = Pod(metadata=ObjectMeta(name="web", labels={"owner": "me"}))
        ControllerAdapter().update(pod, _fill_template, _fill_metadata)
        assert pod.spec.containers[0].image == "nginx"
        assert pod.metadata.labels == {
            "owner": "me",
            "io.kompose.service": "web",
            "tier": "front",
        }
        assert pod.metadata.annotations == {"note": "x"}

    def test_unknown_variant_raises(self):
        cm = ConfigMap(metadata=ObjectMeta(name="cfg"))
        adapter = ControllerAdapter()
        assert not adapter.is_supported(cm)
        with pytest.raises(UnsupportedVariantError) as exc_info:
            adapter.update(cm, _fill_template, _fill_metadata)
        assert exc_info.value.context["kind"] == "ConfigMap"

    def test_register_extends_variants(self):
        adapter = ControllerAdapter(variants={})
        pod = Pod(metadata=ObjectMeta(name="web"))
        assert not adapter.is_supported(pod)

        seen = []
        adapter.register(
            Pod,
            VariantAccessors(
                template=lambda obj: PodTemplateSpec(spec=obj.spec),
                metadata=lambda obj: obj.metadata,
            ),
        )
        adapter.update(
            pod, lambda t: seen.append("template"), lambda m: seen.append("meta")
        )
        assert seen == ["template", "meta"]
