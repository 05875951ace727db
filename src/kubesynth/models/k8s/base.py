from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KubeBase(BaseModel):
    """
    Base class for every Kubernetes API structure.

    Fields are declared in snake_case and serialized in the API's camelCase
    (`model_dump(by_alias=True)`); either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ObjectMeta(KubeBase):
    """Identity and free-form metadata of a top-level object."""

    name: str = Field(..., min_length=1, description="Object name.")
    namespace: str | None = Field(default=None, description="Owning namespace.")
    labels: dict[str, str] | None = Field(default=None)
    annotations: dict[str, str] | None = Field(default=None)


class TemplateMeta(KubeBase):
    """Metadata of an embedded pod template (no name required)."""

    labels: dict[str, str] | None = Field(default=None)
    annotations: dict[str, str] | None = Field(default=None)


class LabelSelector(KubeBase):
    match_labels: dict[str, str] | None = Field(default=None)


class KubeObject(KubeBase):
    """
    Top-level API object.

    Every emitted object carries a (kind, namespace, name) identity used for
    deduplication and removal.
    """

    api_version: str = Field(..., min_length=1)
    kind: str = Field(..., min_length=1)
    metadata: ObjectMeta

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def identity(self) -> tuple[str, str, str]:
        """(kind, namespace, name) key of the object."""
        return (self.kind, self.metadata.namespace or "", self.metadata.name)
