"""Rendering of synthesized objects as YAML or JSON manifests."""

from __future__ import annotations

import io
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from ruamel.yaml import YAML

from kubesynth.exceptions import OutputError
from kubesynth.models.k8s import KubeObject

logger = logging.getLogger(__name__)


class ManifestWriter:
    """
    Serialize objects with camelCase keys, dropping unset values.

    Output goes to stdout, to one multi-document file, or to a directory
    with one `<name>-<kind>.<ext>` file per object.
    """

    def __init__(self, generate_json: bool = False, indent: int = 2) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self.generate_json = generate_json
        self.indent = indent
        self._yaml = YAML()
        self._configure_yaml()

    def _configure_yaml(self) -> None:
        """Configure YAML output formatting."""
        self._yaml.indent(
            mapping=self.indent, sequence=self.indent + 2, offset=self.indent
        )
        self._yaml.default_flow_style = False
        self._yaml.allow_unicode = True
        self._yaml.width = 4096

    @property
    def extension(self) -> str:
        return "json" if self.generate_json else "yaml"

    # ------------------------------------------------------------------ #
    # Conversion
    # ------------------------------------------------------------------ #

    def _object_to_dict(self, obj: Any) -> Any:
        """
        Convert a dumped object recursively, excluding None values and empty
        lists. Empty mappings are kept (`emptyDir: {}` is meaningful).
        """
        if isinstance(obj, list):
            items = [self._object_to_dict(item) for item in obj if item is not None]
            return items or None
        if isinstance(obj, dict):
            result = {}
            for k, v in obj.items():
                converted = self._object_to_dict(v)
                if converted is not None:
                    result[k] = converted
            return result
        return obj

    def to_dict(self, obj: KubeObject) -> dict[str, Any]:
        return self._object_to_dict(obj.model_dump(by_alias=True, exclude_none=True))

    def render(self, objects: list[KubeObject]) -> str:
        """All objects as one document stream (YAML) or one `List` (JSON)."""
        docs = [self.to_dict(obj) for obj in objects]
        if self.generate_json:
            if len(docs) == 1:
                return json.dumps(docs[0], indent=self.indent) + "\n"
            payload = {"apiVersion": "v1", "kind": "List", "items": docs}
            return json.dumps(payload, indent=self.indent) + "\n"
        stream = io.StringIO()
        self._yaml.dump_all(docs, stream)
        return stream.getvalue()

    # ------------------------------------------------------------------ #
    # Output
    # ------------------------------------------------------------------ #

    def write(
        self,
        objects: list[KubeObject],
        output: str | Path | None = None,
        stream: TextIO | None = None,
    ) -> list[Path]:
        """
        Write `objects` and return the files created.

        `output` of None or `-` writes to `stream` (default stdout); an
        existing directory, or a path ending in `/`, receives one file per
        object; any other path receives a single file.

        Raises:
            OutputError: if a file or directory cannot be written.
        """
        if output is None or str(output) == "-":
            (stream or sys.stdout).write(self.render(objects))
            return []

        target = Path(output)
        try:
            if target.is_dir() or str(output).endswith(("/", "\\")):
                return self._write_per_object(objects, target)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.render(objects), encoding="utf-8")
        except OSError as e:
            raise OutputError(
                f"Cannot write manifests: {e}", output_path=str(output)
            ) from e
        self._logger.info(f"Wrote {len(objects)} object(s) to {target}")
        return [target]

    def _write_per_object(
        self, objects: list[KubeObject], directory: Path
    ) -> list[Path]:
        directory.mkdir(parents=True, exist_ok=True)
        written = []
        for obj in objects:
            file_name = f"{obj.metadata.name}-{obj.kind.lower()}.{self.extension}"
            path = directory / file_name
            path.write_text(self.render([obj]), encoding="utf-8")
            self._logger.debug(f"Wrote {path}")
            written.append(path)
        self._logger.info(f"Wrote {len(written)} file(s) to {directory}")
        return written
