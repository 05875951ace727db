from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from kubesynth.ir.models import ConvertOptions, ServiceConfig
    from kubesynth.models.k8s import KubeObject


class ListPass(Protocol):
    """A step that rewrites the whole list of synthesized objects."""

    name: str

    def run(
        self,
        objects: list["KubeObject"],
        services: dict[str, "ServiceConfig"],
        options: "ConvertOptions",
    ) -> list["KubeObject"]:
        """
        Rewrite `objects` and return the list for the next step.

        `services` maps each service name to the configuration its objects
        came from; `options` holds the flags of the current conversion.
        """
        ...

    def get_pass_info(self) -> dict[str, Any]:
        """Describe this step; at least a `name` key is expected."""
        ...
