# tests/unit/test_ir_models.py
"""
Unit tests for the service model IR (kubesynth/ir/models.py)
"""


import pytest
from pydantic import ValidationError

from kubesynth.ir.models import (
    Controller,
    ConvertOptions,
    EnvFile,
    HealthCheck,
    Port,
    ServiceConfig,
    ServiceModel,
    ServiceType,
    VolumeMode,
    VolumeSpec,
)

# ---------------------------------------------------------------------------
#                                FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def web() -> ServiceConfig:
    return ServiceConfig(
        name="web",
        image="nginx",
        ports=[Port(container_port=80)],
        volumes=[VolumeSpec(volume_name="data", container="/data", mode="rw")],
    )


# ---------------------------------------------------------------------------
#                                PORT
# ---------------------------------------------------------------------------


class TestPort:
    def test_protocol_upper_cased(self):
        assert Port(container_port=53, protocol="udp").protocol == "UDP"

    def test_unknown_protocol_rejected(self):
        with pytest.raises(ValidationError):
            Port(container_port=80, protocol="http")

    def test_port_range_enforced(self):
        with pytest.raises(ValidationError):
            Port(container_port=0)

    def test_id_combines_port_and_protocol(self):
        assert Port(container_port=80).id == "80/TCP"


# ---------------------------------------------------------------------------
#                                SERVICE
# ---------------------------------------------------------------------------


class TestServiceConfig:
    def test_defaults(self):
        svc = ServiceConfig(name="a")
        assert svc.replicas == 1
        assert svc.service_type is ServiceType.CLUSTER_IP
        assert svc.in_group is False

    def test_vol_list_derived_from_volumes(self, web: ServiceConfig):
        assert web.vol_list == ["data:/data:rw"]

    def test_explicit_vol_list_kept(self):
        svc = ServiceConfig(
            name="a",
            volumes=[VolumeSpec(host="/srv", container="/srv")],
            vol_list=["custom"],
        )
        assert svc.vol_list == ["custom"]

    def test_env_file_shorthand(self):
        svc = ServiceConfig.model_validate({"name": "a", "env_files": ["./a.env"]})
        assert svc.env_files == [EnvFile(path="./a.env")]

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            ServiceConfig.model_validate({"name": "a", "bogus": 1})

    def test_read_only_volume_modes(self):
        assert VolumeSpec(container="/x", mode="ro").read_only
        assert VolumeSpec(container="/x", mode="rox").read_only
        assert not VolumeSpec(container="/x", mode="rwx").read_only


class TestHealthCheck:
    def test_default_check_is_unset(self):
        assert HealthCheck().is_unset()

    def test_check_with_command_is_set(self):
        assert not HealthCheck(test=["true"]).is_unset()


# ---------------------------------------------------------------------------
#                                OPTIONS / MODEL
# ---------------------------------------------------------------------------


class TestConvertOptions:
    def test_defaults(self):
        opts = ConvertOptions()
        assert opts.controller is Controller.AUTO
        assert opts.volumes is VolumeMode.PERSISTENT_VOLUME_CLAIM
        assert opts.pvc_request_size == "100Mi"
        assert not opts.is_stateful

    def test_controller_case_insensitive(self):
        opts = ConvertOptions(controller="StatefulSet")
        assert opts.controller is Controller.STATEFULSET
        assert opts.is_stateful

    def test_unknown_controller_rejected(self):
        with pytest.raises(ValidationError):
            ConvertOptions(controller="cronjob")


class TestServiceModel:
    def test_names_filled_from_keys(self):
        model = ServiceModel.model_validate(
            {"services": {"web": {"image": "nginx"}, "db": {"name": "database"}}}
        )
        assert model.services["web"].name == "web"
        assert model.services["db"].name == "database"

    def test_schema_version_frozen(self):
        model = ServiceModel()
        with pytest.raises(ValidationError):
            model.schema_version = "2.0.0"
