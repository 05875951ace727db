from typing import Literal

from pydantic import Field

from .base import KubeBase, KubeObject, LabelSelector, ObjectMeta


class VolumeResourceRequirements(KubeBase):
    requests: dict[str, str] | None = Field(default=None)


class PersistentVolumeClaimSpec(KubeBase):
    access_modes: list[str] = Field(default_factory=list)
    resources: VolumeResourceRequirements | None = Field(default=None)
    storage_class_name: str | None = Field(default=None)
    selector: LabelSelector | None = Field(default=None)


class PersistentVolumeClaim(KubeObject):
    api_version: str = Field(default="v1")
    kind: Literal["PersistentVolumeClaim"] = Field(default="PersistentVolumeClaim")
    spec: PersistentVolumeClaimSpec = Field(default_factory=PersistentVolumeClaimSpec)


class PersistentVolumeClaimTemplate(KubeBase):
    """Claim embedded in a StatefulSet; carries no apiVersion or kind."""

    metadata: ObjectMeta
    spec: PersistentVolumeClaimSpec = Field(default_factory=PersistentVolumeClaimSpec)

    @classmethod
    def from_claim(
        cls, claim: PersistentVolumeClaim
    ) -> "PersistentVolumeClaimTemplate":
        return cls(
            metadata=claim.metadata.model_copy(deep=True),
            spec=claim.spec.model_copy(deep=True),
        )


class ConfigMap(KubeObject):
    """Config artifact holding env-file values or config-file contents."""

    api_version: str = Field(default="v1")
    kind: Literal["ConfigMap"] = Field(default="ConfigMap")
    data: dict[str, str] | None = Field(default=None)
    binary_data: dict[str, str] | None = Field(
        default=None, description="Base64-encoded non-UTF-8 contents."
    )


__all__ = [
    "VolumeResourceRequirements",
    "PersistentVolumeClaimSpec",
    "PersistentVolumeClaim",
    "PersistentVolumeClaimTemplate",
    "ConfigMap",
]
