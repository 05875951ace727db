"""Sequential runner for the passes applied after per-unit synthesis."""

import logging
from typing import TYPE_CHECKING, Any

from .protocols import ListPass

if TYPE_CHECKING:
    from kubesynth.ir.models import ConvertOptions, ServiceConfig
    from kubesynth.models.k8s import KubeObject

logger = logging.getLogger(__name__)


class PipelineRunner:
    """
    Threads the synthesized object list through an ordered set of passes.

    A pass hands back the list the next pass will see. Between passes the list
    belongs to the runner, so a pass may rebuild it or edit it in place.
    """

    def __init__(self, passes: list[ListPass] | None = None):
        self._logger = logger.getChild(self.__class__.__name__)
        self._passes: list[ListPass] = list(passes or [])

    def add_pass(self, list_pass: ListPass) -> "PipelineRunner":
        """Append `list_pass`; returns the runner so calls can be chained."""
        self._passes.append(list_pass)
        return self

    def clear_passes(self) -> "PipelineRunner":
        self._passes.clear()
        return self

    def get_passes(self) -> list[ListPass]:
        """Shallow copy of the registered passes, in run order."""
        return self._passes.copy()

    def execute(
        self,
        objects: list["KubeObject"],
        services: dict[str, "ServiceConfig"],
        options: "ConvertOptions",
    ) -> list["KubeObject"]:
        """
        Feed `objects` through the passes and return what the last one yields.

        `services` and `options` are passed to every pass untouched. A failing
        pass is logged and its exception propagates as raised.
        """
        total = len(self._passes)
        self._logger.info(f"Running {total} pass(es) over {len(objects)} object(s)")
        for position, list_pass in enumerate(self._passes, start=1):
            self._logger.debug(f"Pass {position}/{total}: {list_pass.name}")
            try:
                objects = list_pass.run(objects, services, options)
            except Exception as exc:
                self._logger.error(f"Pass {list_pass.name} failed: {exc}")
                raise
        self._logger.info(f"Pipeline produced {len(objects)} object(s)")
        return objects

    def _describe(self, list_pass: ListPass) -> dict[str, Any]:
        cls_name = type(list_pass).__name__
        try:
            return list_pass.get_pass_info()
        except AttributeError as exc:
            self._logger.warning(f"Could not get info for pass {cls_name}: {exc}")
            return {"name": cls_name, "error": str(exc)}

    def get_pipeline_info(self) -> dict[str, Any]:
        """Summary of the runner and each registered pass, for diagnostics."""
        return {
            "runner_class": self.__class__.__name__,
            "pass_count": len(self._passes),
            "passes": [self._describe(p) for p in self._passes],
        }
