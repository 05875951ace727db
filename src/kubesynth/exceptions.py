"""
kubesynth Exception Classes

Typed exceptions raised while loading a service model, synthesizing
Kubernetes objects and writing manifests.
"""

from typing import Any


class KubeSynthError(Exception):
    """Base exception for all kubesynth errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}

    @property
    def service_name(self) -> str | None:
        """Name of the service being synthesized when the error was raised."""
        return self.context.get("service_name")

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg = f"{base_msg} (Context: {context_str})"
        return base_msg


class ServiceModelError(KubeSynthError):
    """Raised when the service model cannot be read, parsed or validated."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        service_name: str | None = None,
    ) -> None:
        context = {}
        if source:
            context["source"] = source
        if service_name:
            context["service_name"] = service_name
        super().__init__(message, "SERVICE_MODEL_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the model error."""
        if "source" in self.context:
            return f"Check that '{self.context['source']}' exists and is readable"
        return "Check the service model for missing or invalid fields"


class UnknownPolicyError(KubeSynthError):
    """Raised for restart or image-pull-policy tokens with no Kubernetes equivalent."""

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        policy_field: str | None = None,
        value: str | None = None,
    ) -> None:
        context = {}
        if service_name:
            context["service_name"] = service_name
        if policy_field:
            context["policy_field"] = policy_field
        if value is not None:
            context["value"] = value
        super().__init__(message, "UNKNOWN_POLICY", context)


class HealthCheckError(KubeSynthError):
    """Raised when an enabled health check has no command, HTTP target or TCP port."""

    def __init__(self, message: str, service_name: str | None = None) -> None:
        context = {}
        if service_name:
            context["service_name"] = service_name
        super().__init__(message, "HEALTH_CHECK_ERROR", context)


class UnsupportedVariantError(KubeSynthError):
    """Raised when an object outside the workload variant set reaches the adapter."""

    def __init__(
        self,
        message: str,
        kind: str | None = None,
        service_name: str | None = None,
    ) -> None:
        context = {}
        if kind:
            context["kind"] = kind
        if service_name:
            context["service_name"] = service_name
        super().__init__(message, "UNSUPPORTED_VARIANT", context)


class NetworkModeMergeError(KubeSynthError):
    """Raised when a network-mode merge has an endpoint that cannot take part in it."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        target: str | None = None,
        service_name: str | None = None,
    ) -> None:
        context = {}
        if source:
            context["source"] = source
        if target:
            context["target"] = target
        if service_name:
            context["service_name"] = service_name
        super().__init__(message, "NETWORK_MODE_MERGE_ERROR", context)


class OutputError(KubeSynthError):
    """Raised when the synthesized objects cannot be written."""

    def __init__(self, message: str, output_path: str | None = None) -> None:
        context = {}
        if output_path:
            context["output_path"] = output_path
        super().__init__(message, "OUTPUT_ERROR", context)
