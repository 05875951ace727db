"""Unit tests for autoscaler synthesis."""

import logging

import pytest

from kubesynth.ir.models import ServiceConfig
from kubesynth.synthesis.autoscaler import (
    DEFAULT_CPU_UTILIZATION,
    DEFAULT_MAX_REPLICAS,
    DEFAULT_MEMORY_UTILIZATION,
    DEFAULT_MIN_REPLICAS,
    create_autoscaler,
    has_autoscaler_labels,
    hpa_values,
)


def _service(**labels: str) -> ServiceConfig:
    return ServiceConfig(
        name="web",
        replicas=2,
        labels={f"kompose.hpa.{k.replace('_', '.')}": v for k, v in labels.items()},
    )


class TestHpaValues:
    def test_defaults(self):
        values = hpa_values(_service(cpu="50"))
        assert values.min_replicas == DEFAULT_MIN_REPLICAS
        assert values.max_replicas == DEFAULT_MAX_REPLICAS
        assert values.memory_utilization == DEFAULT_MEMORY_UTILIZATION

    def test_explicit_values(self):
        values = hpa_values(
            _service(cpu="80", memory="60", replicas_min="2", replicas_max="10")
        )
        assert (values.min_replicas, values.max_replicas) == (2, 10)
        assert (values.cpu_utilization, values.memory_utilization) == (80, 60)

    def test_max_below_min_is_clamped(self, caplog):
        with caplog.at_level(logging.WARNING):
            values = hpa_values(_service(replicas_min="5", replicas_max="2"))
        assert values.max_replicas == 5
        assert "below min replicas" in caplog.text

    @pytest.mark.parametrize("raw", ["lots", "-3"])
    def test_invalid_value_uses_default(self, raw: str, caplog):
        with caplog.at_level(logging.WARNING):
            values = hpa_values(_service(replicas_min=raw))
        assert values.min_replicas == DEFAULT_MIN_REPLICAS
        assert raw in caplog.text

    def test_utilization_out_of_range(self, caplog):
        with caplog.at_level(logging.WARNING):
            values = hpa_values(_service(cpu="150"))
        assert values.cpu_utilization == DEFAULT_CPU_UTILIZATION
        assert "outside 1-100" in caplog.text


class TestCreateAutoscaler:
    def test_has_labels(self):
        assert has_autoscaler_labels(_service(cpu="50").labels)
        assert not has_autoscaler_labels({"team": "a"})

    @pytest.mark.parametrize(
        "kind, api_version",
        [
            ("Deployment", "apps/v1"),
            ("StatefulSet", "apps/v1"),
            ("DeploymentConfig", "apps.openshift.io/v1"),
        ],
    )
    def test_targets_workload_kind(self, kind: str, api_version: str):
        svc = _service(cpu="50")
        hpa = create_autoscaler("web", kind, svc)
        ref = hpa.spec.scale_target_ref
        assert (ref.api_version, ref.kind, ref.name) == (api_version, kind, "web")
        assert hpa.metadata.labels == {"io.kompose.service": "web"}
        assert svc.replicas == 0

    def test_metrics(self):
        hpa = create_autoscaler("web", "Deployment", _service(cpu="40", memory="90"))
        targets = {
            m.resource.name: m.resource.target.average_utilization
            for m in hpa.spec.metrics
        }
        assert targets == {"cpu": 40, "memory": 90}

    @pytest.mark.parametrize("kind", ["DaemonSet", "Pod"])
    def test_unscalable_kind_skipped(self, kind: str, caplog):
        svc = _service(cpu="50")
        with caplog.at_level(logging.WARNING):
            assert create_autoscaler("web", kind, svc) is None
        assert svc.replicas == 2
        assert "cannot be scaled" in caplog.text
