# tests/unit/io/test_file_loader.py
"""
Unit tests for the service-model loader (kubesynth/io/file_loader.py)
"""

import json
import logging
from pathlib import Path

import pytest

from kubesynth.exceptions import ServiceModelError
from kubesynth.io.file_loader import ServiceModelLoader

# ---------------------------------------------------------------------------
#                                FIXTURES
# ---------------------------------------------------------------------------

MODEL_YAML = """\
services:
  web:
    image: nginx
    ports:
      - container_port: 80
    env_files:
      - ./app.env
    volumes:
      - host: ./html
        container: /usr/share/nginx/html
        mode: ro
  db:
    image: postgres
    restart: always
"""


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    (tmp_path / "model.yaml").write_text(MODEL_YAML)
    (tmp_path / "app.env").write_text("GREETING=hello\n")
    return tmp_path


# ---------------------------------------------------------------------------
#                                RAW LOADING
# ---------------------------------------------------------------------------


class TestLoadRaw:
    def test_yaml(self, model_dir: Path):
        data = ServiceModelLoader.load_raw(model_dir / "model.yaml")
        assert set(data["services"]) == {"web", "db"}

    def test_json(self, tmp_path: Path):
        path = tmp_path / "model.json"
        path.write_text(json.dumps({"services": {"a": {"image": "x"}}}))
        assert ServiceModelLoader.load_raw(path)["services"]["a"]["image"] == "x"

    def test_missing_file(self, tmp_path: Path, caplog):
        with caplog.at_level(logging.ERROR):
            with pytest.raises(ServiceModelError, match="File not found"):
                ServiceModelLoader.load_raw(tmp_path / "nope.yaml")
        assert "File not found" in caplog.text

    def test_unsupported_extension(self, tmp_path: Path):
        path = tmp_path / "model.toml"
        path.write_text("")
        with pytest.raises(ServiceModelError, match="Unsupported extension"):
            ServiceModelLoader.load_raw(path)

    @pytest.mark.parametrize(
        "name, text",
        [("bad.yaml", "services: [unclosed"), ("bad.json", "{not json")],
    )
    def test_parse_error(self, tmp_path: Path, name: str, text: str):
        path = tmp_path / name
        path.write_text(text)
        with pytest.raises(ServiceModelError, match="Cannot parse"):
            ServiceModelLoader.load_raw(path)

    def test_top_level_must_be_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ServiceModelError, match="must be a mapping"):
            ServiceModelLoader.load_raw(path)


# ---------------------------------------------------------------------------
#                                MODEL LOADING
# ---------------------------------------------------------------------------


class TestLoad:
    def test_names_and_fields(self, model_dir: Path):
        model = ServiceModelLoader.load(model_dir / "model.yaml")
        assert model.services["web"].name == "web"
        assert model.services["web"].ports[0].container_port == 80
        assert model.services["db"].restart == "always"

    def test_env_file_read_relative_to_model(self, model_dir: Path):
        model = ServiceModelLoader.load(model_dir / "model.yaml")
        [env_file] = model.services["web"].env_files
        assert env_file.path == "./app.env"
        assert env_file.values == {"GREETING": "hello"}

    def test_relative_host_resolved(self, model_dir: Path):
        model = ServiceModelLoader.load(model_dir / "model.yaml")
        host = model.services["web"].volumes[0].host
        assert Path(host) == (model_dir / "html").resolve()

    def test_missing_env_file(self, model_dir: Path):
        (model_dir / "app.env").unlink()
        with pytest.raises(ServiceModelError) as exc_info:
            ServiceModelLoader.load(model_dir / "model.yaml")
        assert exc_info.value.service_name == "web"
        assert "app.env" in exc_info.value.context["source"]

    def test_invalid_model(self, tmp_path: Path):
        path = tmp_path / "model.yaml"
        path.write_text("services:\n  web:\n    replicas: -1\n")
        with pytest.raises(ServiceModelError, match="Invalid service model"):
            ServiceModelLoader.load(path)

    def test_unknown_field_rejected(self, tmp_path: Path):
        path = tmp_path / "model.yaml"
        path.write_text("services:\n  web:\n    imagee: nginx\n")
        with pytest.raises(ServiceModelError):
            ServiceModelLoader.load(path)
