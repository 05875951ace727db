"""Unit tests for volume, claim and config-file synthesis."""

import base64
import logging
from pathlib import Path

import pytest

from kubesynth.ir.models import ConvertOptions, ServiceConfig, VolumeSpec
from kubesynth.synthesis.volumes import (
    access_modes,
    configure_tmpfs,
    configure_volumes,
    create_claim,
)

# ---- Fakes / helpers ----


def _options(mode: str, **kwargs) -> ConvertOptions:
    return ConvertOptions(volumes=mode, **kwargs)


def _service(*volumes: VolumeSpec, **kwargs) -> ServiceConfig:
    return ServiceConfig(name="web", volumes=list(volumes), **kwargs)


# ---- Tests ----


class TestClaims:
    @pytest.mark.parametrize(
        "mode, expected",
        [
            ("ro", "ReadOnlyMany"),
            ("rox", "ReadOnlyMany"),
            ("rwx", "ReadWriteMany"),
            ("rwop", "ReadWriteOncePod"),
            ("rw", "ReadWriteOnce"),
            ("", "ReadWriteOnce"),
        ],
    )
    def test_access_modes(self, mode: str, expected: str):
        assert access_modes(mode) == [expected]

    def test_create_claim(self):
        claim = create_claim(
            "data", "rw", "1Gi", selector_value="fast", storage_class="ssd"
        )
        assert claim.metadata.labels == {"io.kompose.service": "data"}
        assert claim.spec.resources.requests == {"storage": "1Gi"}
        assert claim.spec.storage_class_name == "ssd"
        assert claim.spec.selector.match_labels == {"io.kompose.service": "fast"}

    def test_claim_per_volume(self):
        svc = _service(
            VolumeSpec(volume_name="db_data", container="/var/lib/db"),
            VolumeSpec(container="/cache", mode="ro"),
        )
        result = configure_volumes("web", svc, ConvertOptions())
        assert [c.name for c in result.claims] == ["db-data", "web-claim1"]
        assert [v.persistent_volume_claim.claim_name for v in result.volumes] == [
            "db-data",
            "web-claim1",
        ]
        assert result.mounts[1].read_only is True
        assert result.volumes[1].persistent_volume_claim.read_only is True
        assert result.claims[0].spec.resources.requests == {"storage": "100Mi"}

    def test_claim_size_precedence(self):
        svc = _service(
            VolumeSpec(volume_name="a", container="/a", size="5Gi"),
            VolumeSpec(volume_name="b", container="/b"),
            labels={"kompose.volume.size": "2Gi"},
        )
        result = configure_volumes("web", svc, _options("persistentVolumeClaim"))
        sizes = [c.spec.resources.requests["storage"] for c in result.claims]
        assert sizes == ["5Gi", "2Gi"]


class TestEmptyDirAndHostPath:
    def test_empty_dir_mode(self):
        svc = _service(VolumeSpec(host="./data", container="/data"))
        result = configure_volumes("web", svc, _options("emptyDir"))
        assert result.volumes[0].name == "web-empty0"
        assert result.volumes[0].empty_dir is not None
        assert result.claims == []

    def test_host_path_mode(self):
        svc = _service(VolumeSpec(host="/srv/data", container="/data"))
        result = configure_volumes("web", svc, _options("hostPath"))
        assert result.volumes[0].name == "web-hostpath0"
        assert result.volumes[0].host_path.path == "/srv/data"
        assert result.mounts[0].mount_path == "/data"

    def test_host_path_without_host_uses_empty_dir(self, caplog):
        svc = _service(VolumeSpec(container="/scratch"))
        with caplog.at_level(logging.WARNING):
            result = configure_volumes("web", svc, _options("hostPath"))
        assert result.volumes[0].name == "web-empty0"
        assert result.volumes[0].empty_dir is not None
        assert "has no host path" in caplog.text


class TestConfigMapMode:
    def test_single_file_mounted_with_sub_path(self, tmp_path: Path):
        conf = tmp_path / "nginx.conf"
        conf.write_text("server {}\n")
        svc = _service(VolumeSpec(host=str(conf), container="/etc/nginx/nginx.conf"))
        result = configure_volumes("web", svc, _options("configMap"))

        config_map = result.config_maps[0]
        assert config_map.name == "web-cm0"
        assert config_map.data == {"nginx.conf": "server {}\n"}
        assert config_map.metadata.labels == {"io.kompose.service": "web"}
        mount = result.mounts[0]
        assert (mount.sub_path, mount.read_only) == ("nginx.conf", True)
        items = result.volumes[0].config_map.items
        assert [(i.key, i.path) for i in items] == [("nginx.conf", "nginx.conf")]

    def test_directory_mounted_whole(self, tmp_path: Path):
        (tmp_path / "b.conf").write_text("b")
        (tmp_path / "a.conf").write_text("a")
        svc = _service(VolumeSpec(host=str(tmp_path), container="/etc/app"))
        result = configure_volumes("web", svc, _options("configMap"))
        assert list(result.config_maps[0].data) == ["a.conf", "b.conf"]
        assert result.mounts[0].sub_path is None
        assert result.volumes[0].config_map.items is None

    def test_binary_content_base64(self, tmp_path: Path):
        blob = tmp_path / "cert.der"
        blob.write_bytes(b"\xff\xfe\x00")
        svc = _service(VolumeSpec(host=str(blob), container="/certs/cert.der"))
        config_map = configure_volumes("web", svc, _options("configMap")).config_maps[0]
        assert config_map.data is None
        assert config_map.binary_data == {
            "cert.der": base64.b64encode(b"\xff\xfe\x00").decode("ascii")
        }

    def test_missing_path_falls_back_to_claim(self, tmp_path: Path):
        svc = _service(VolumeSpec(host=str(tmp_path / "nope"), container="/x"))
        result = configure_volumes("web", svc, _options("configMap"))
        assert result.config_maps == []
        assert [c.name for c in result.claims] == ["web-claim0"]

    def test_empty_directory_falls_back_to_claim(self, tmp_path: Path):
        (tmp_path / "nested").mkdir()
        svc = _service(VolumeSpec(host=str(tmp_path), container="/x"))
        result = configure_volumes("web", svc, _options("configMap"))
        assert result.config_maps == []
        assert len(result.claims) == 1

    @pytest.mark.parametrize("host", [None, "/var/run/docker.sock"])
    def test_socket_or_named_volume_skipped(self, host, caplog):
        svc = _service(VolumeSpec(volume_name="v", host=host, container="/x"))
        with caplog.at_level(logging.WARNING):
            result = configure_volumes("web", svc, _options("configMap"))
        assert result.volumes == []
        assert result.mounts == []
        assert "Skipping volume" in caplog.text


class TestTmpfs:
    def test_memory_backed_empty_dir(self):
        svc = ServiceConfig(name="web", tmpfs=["/run", "/tmp:size=64m"])
        result = configure_tmpfs("web", svc)
        assert [v.name for v in result.volumes] == ["web-tmpfs0", "web-tmpfs1"]
        assert result.volumes[0].empty_dir.medium == "Memory"
        assert [m.mount_path for m in result.mounts] == ["/run", "/tmp"]
