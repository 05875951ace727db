"""Unit tests for ordering, deduplication and update strategies."""

import pytest

from kubesynth.ir.models import ConvertOptions, ServiceConfig, VolumeSpec
from kubesynth.models.k8s import (
    ConfigMap,
    DaemonSet,
    Deployment,
    DeploymentConfig,
    ObjectMeta,
    Service,
    StatefulSet,
)
from kubesynth.synthesis.postprocess import (
    RemoveDuplicatesPass,
    SortServicesFirstPass,
    apply_update_strategy,
    remove_duplicates,
    sort_services_first,
)
from kubesynth.synthesis.volumes import create_claim


def _meta(name: str, namespace: str | None = None) -> ObjectMeta:
    return ObjectMeta(name=name, namespace=namespace)


@pytest.fixture
def with_volume() -> ServiceConfig:
    return ServiceConfig(
        name="db", volumes=[VolumeSpec(volume_name="data", container="/data")]
    )


class TestSortServicesFirst:
    def test_stable_partition(self):
        objects = [
            Deployment(metadata=_meta("a")),
            Service(metadata=_meta("b")),
            ConfigMap(metadata=_meta("c")),
            Service(metadata=_meta("a")),
        ]
        result = sort_services_first(objects)
        assert [(o.kind, o.name) for o in result] == [
            ("Service", "b"),
            ("Service", "a"),
            ("Deployment", "a"),
            ("ConfigMap", "c"),
        ]

    def test_idempotent(self):
        objects = [Deployment(metadata=_meta("a")), Service(metadata=_meta("a"))]
        once = sort_services_first(objects)
        assert sort_services_first(once) == once


class TestRemoveDuplicates:
    def test_first_occurrence_kept(self):
        first = ConfigMap(metadata=_meta("cfg"), data={"a": "1"})
        second = ConfigMap(metadata=_meta("cfg"), data={"a": "2"})
        assert remove_duplicates([first, second]) == [first]

    def test_identity_includes_kind_and_namespace(self):
        objects = [
            ConfigMap(metadata=_meta("x")),
            Service(metadata=_meta("x")),
            ConfigMap(metadata=_meta("x", "other")),
        ]
        assert len(remove_duplicates(objects)) == 3

    def test_converges(self):
        objects = [Service(metadata=_meta("a")), Service(metadata=_meta("a"))]
        once = remove_duplicates(objects)
        assert remove_duplicates(once) == once


class TestApplyUpdateStrategy:
    def test_no_volumes_untouched(self):
        dep = Deployment(metadata=_meta("web"))
        apply_update_strategy(dep, ServiceConfig(name="web"), ConvertOptions())
        assert dep.spec.strategy is None

    def test_deployment_recreate(self, with_volume: ServiceConfig):
        dep = Deployment(metadata=_meta("db"))
        apply_update_strategy(dep, with_volume, ConvertOptions())
        assert dep.spec.strategy.type == "Recreate"

    def test_deploymentconfig_recreate(self, with_volume: ServiceConfig):
        dc = DeploymentConfig(metadata=_meta("db"))
        apply_update_strategy(dc, with_volume, ConvertOptions())
        assert dc.spec.strategy.type == "Recreate"

    def test_statefulset_claim_templates_unioned(self, with_volume: ServiceConfig):
        sts = StatefulSet(metadata=_meta("db"))
        claims = [create_claim("data", "rw", "1Gi")]
        opts = ConvertOptions(controller="statefulset")
        apply_update_strategy(sts, with_volume, opts, claims)
        apply_update_strategy(sts, with_volume, opts, claims)
        templates = sts.spec.volume_claim_templates
        assert [t.metadata.name for t in templates] == ["data"]
        assert templates[0].spec.resources.requests == {"storage": "1Gi"}

    def test_statefulset_config_map_mode_has_no_templates(
        self, with_volume: ServiceConfig
    ):
        sts = StatefulSet(metadata=_meta("db"))
        opts = ConvertOptions(controller="statefulset", volumes="configMap")
        apply_update_strategy(sts, with_volume, opts, [create_claim("d", "", "1Gi")])
        assert sts.spec.volume_claim_templates is None

    def test_daemonset_untouched(self, with_volume: ServiceConfig):
        ds = DaemonSet(metadata=_meta("db"))
        apply_update_strategy(ds, with_volume, ConvertOptions())
        assert ds == DaemonSet(metadata=_meta("db"))


class TestPasses:
    def test_sort_pass(self):
        objects = [Deployment(metadata=_meta("a")), Service(metadata=_meta("a"))]
        result = SortServicesFirstPass().run(objects, {}, ConvertOptions())
        assert result[0].kind == "Service"

    def test_dedup_pass(self):
        objects = [Service(metadata=_meta("a")), Service(metadata=_meta("a"))]
        assert len(RemoveDuplicatesPass().run(objects, {}, ConvertOptions())) == 1

    def test_pass_names(self):
        assert SortServicesFirstPass().get_pass_info()["name"] == "sort-services-first"
        assert RemoveDuplicatesPass.name == "remove-duplicates"
