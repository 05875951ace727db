"""Unit tests for service grouping."""

import pytest

from kubesynth.ir.models import GroupMode, ServiceConfig, VolumeSpec
from kubesynth.synthesis.grouping import group_id, group_services, group_workload_name


def _labelled(group: str | None = None) -> ServiceConfig:
    labels = {"kompose.service.group": group} if group else {}
    return ServiceConfig(labels=labels)


class TestGroupId:
    def test_label_mode(self):
        assert group_id(_labelled("g1"), GroupMode.LABEL) == "g1"
        assert group_id(_labelled(), GroupMode.LABEL) == ""

    def test_volume_mode_concatenates_mounts(self):
        svc = ServiceConfig(
            volumes=[
                VolumeSpec(volume_name="data", container="/data"),
                VolumeSpec(host="./conf", container="/conf", mode="ro"),
            ]
        )
        assert group_id(svc, GroupMode.VOLUME) == "data:/data./conf:/conf:ro"

    def test_no_mode(self):
        assert group_id(_labelled("g1"), GroupMode.NONE) == ""


class TestGroupServices:
    def test_none_mode_groups_nothing(self):
        services = {"a": _labelled("g")}
        assert group_services(services, GroupMode.NONE) == {}
        assert services["a"].in_group is False

    def test_members_sorted_and_flagged(self):
        services = {
            "web": _labelled("front"),
            "api": _labelled("front"),
            "db": _labelled(),
        }
        groups = group_services(services, GroupMode.LABEL)
        assert list(groups) == ["front"]
        assert [s.name for s in groups["front"]] == ["api", "web"]
        assert all(s.in_group for s in groups["front"])
        assert services["db"].in_group is False

    def test_grouping_is_deterministic(self):
        def build():
            return {name: _labelled("g") for name in ("c", "a", "b")}

        first = group_services(build(), GroupMode.LABEL)
        second = group_services(build(), GroupMode.LABEL)
        assert [s.name for s in first["g"]] == [s.name for s in second["g"]]


class TestGroupWorkloadName:
    @pytest.mark.parametrize(
        "mode, expected",
        [(GroupMode.LABEL, "front-end"), (GroupMode.VOLUME, "api-server")],
    )
    def test_names(self, mode: GroupMode, expected: str):
        members = [ServiceConfig(name="api_server"), ServiceConfig(name="web")]
        assert group_workload_name("Front_End", members, mode) == expected
