"""Unit tests for container environment synthesis."""

import logging

from kubesynth.ir.models import EnvFile, EnvVar, ServiceConfig
from kubesynth.synthesis.env import config_envs, env_file_config_maps


def _service(**kwargs) -> ServiceConfig:
    return ServiceConfig(name="web", **kwargs)


class TestConfigEnvs:
    def test_literal_variables_sorted_by_name(self):
        svc = _service(
            environment=[EnvVar(name="ZED", value="1"), EnvVar(name="ALPHA", value="2")]
        )
        envs, env_from = config_envs(svc)
        assert [e.name for e in envs] == ["ALPHA", "ZED"]
        assert envs[0].value == "2"
        assert env_from == []

    def test_env_file_keys_reference_config_map(self):
        svc = _service(env_files=[EnvFile(path="./app.env", values={"A": "x"})])
        envs, _ = config_envs(svc)
        assert envs[0].name == "A"
        ref = envs[0].value_from.config_map_key_ref
        assert (ref.name, ref.key) == ("app-env", "A")

    def test_environment_overrides_env_file(self, caplog):
        svc = _service(
            env_files=[EnvFile(path="app.env", values={"A": "from-file"})],
            environment=[EnvVar(name="A", value="literal")],
        )
        with caplog.at_level(logging.DEBUG):
            envs, _ = config_envs(svc)
        assert len(envs) == 1
        assert envs[0].value == "literal"
        assert envs[0].value_from is None
        assert "overrides the env-file value" in caplog.text

    def test_config_map_sourced_variable(self):
        svc = _service(
            environment=[EnvVar(name="DB", config_map="settings", config_map_key="db")]
        )
        envs, _ = config_envs(svc)
        ref = envs[0].value_from.config_map_key_ref
        assert (ref.name, ref.key) == ("settings", "db")

    def test_unread_env_file_uses_env_from(self):
        svc = _service(env_files=[EnvFile(path="shared.env")])
        envs, env_from = config_envs(svc)
        assert envs == []
        assert env_from[0].config_map_ref.name == "shared-env"

    def test_missing_value_becomes_empty_string(self):
        envs, _ = config_envs(_service(environment=[EnvVar(name="EMPTY")]))
        assert envs[0].value == ""


class TestEnvFileConfigMaps:
    def test_one_config_map_per_read_file(self):
        svc = _service(
            env_files=[
                EnvFile(path="a.env", values={"A": "1"}),
                EnvFile(path="existing.env"),
            ]
        )
        maps = env_file_config_maps(svc)
        assert [m.name for m in maps] == ["a-env"]
        assert maps[0].data == {"A": "1"}
        assert maps[0].metadata.labels == {"io.kompose.service": "a-env"}

    def test_no_env_files(self):
        assert env_file_config_maps(_service()) == []
