"""
Naming, label and unit-conversion helpers shared by the synthesis modules.

Resource names follow the platform's DNS label rules: lower case, `-` instead
of `_`, and at most 63 characters for names derived from file paths.
"""

import re
from typing import Final

from kubesynth.ir.models import ServiceConfig

# ---------------------------------------------------------------------------
# Label keys
# ---------------------------------------------------------------------------

SELECTOR_LABEL: Final[str] = "io.kompose.service"
NETWORK_LABEL_PREFIX: Final[str] = "io.kompose.network/"

LABEL_SERVICE_GROUP: Final[str] = "kompose.service.group"
LABEL_SERVICE_ACCOUNT: Final[str] = "kompose.serviceaccount-name"

LABEL_HPA_CPU: Final[str] = "kompose.hpa.cpu"
LABEL_HPA_MEMORY: Final[str] = "kompose.hpa.memory"
LABEL_HPA_MIN_REPLICAS: Final[str] = "kompose.hpa.replicas.min"
LABEL_HPA_MAX_REPLICAS: Final[str] = "kompose.hpa.replicas.max"

LABEL_INIT_IMAGE: Final[str] = "kompose.init.containers.image"
LABEL_INIT_NAME: Final[str] = "kompose.init.containers.name"
LABEL_INIT_COMMAND: Final[str] = "kompose.init.containers.command"

LABEL_VOLUME_SIZE: Final[str] = "kompose.volume.size"
LABEL_VOLUME_STORAGE_CLASS: Final[str] = "kompose.volume.storage-class-name"
LABEL_VOLUME_SELECTOR: Final[str] = "kompose.volume.selector"

DEPLOY_LABEL_EPHEMERAL_LIMIT: Final[str] = "kompose.ephemeral-storage.limit"
DEPLOY_LABEL_EPHEMERAL_REQUEST: Final[str] = "kompose.ephemeral-storage.request"

# Prefix of the converter's own directive labels; never copied onto objects.
DIRECTIVE_LABEL_PREFIX: Final[str] = "kompose."

MAX_NAME_LENGTH: Final[int] = 63

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_ARG_VARIABLE = re.compile(r"\$([a-zA-Z0-9_]+)")

# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def format_resource_name(name: str) -> str:
    """Lower-case `name` and replace `_` with `-`."""
    return name.replace("_", "-").lower()


def format_container_name(name: str) -> str:
    return name.replace("_", "-")


def container_name(service: ServiceConfig) -> str:
    """Container name of a service: explicit container name, else service name."""
    return format_container_name(service.container_name or service.name)


def format_env_name(path: str, service_name: str) -> str:
    """
    Name of the ConfigMap generated for an env file.

    Leading and trailing `.` and `/` are stripped, every other
    non-alphanumeric character becomes `-`. A name still starting with `-`
    is prefixed with the service name; the result is cut to 63 characters.
    """
    env_name = _NON_ALNUM.sub("-", path.strip("./"))
    if not env_name or env_name.startswith("-"):
        env_name = f"{service_name}{env_name}"
    return env_name[:MAX_NAME_LENGTH]


def format_file_name(path: str) -> str:
    """Base name of `path` usable as a ConfigMap key path."""
    return path.rstrip("/").rsplit("/", 1)[-1].replace("_", "-")


def interpolate_args(args: list[str]) -> list[str]:
    """Rewrite `$VAR` references into the platform's `$(VAR)` form."""
    return [_ARG_VARIABLE.sub(r"$(\1)", arg) for arg in args]


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def base_labels(name: str) -> dict[str, str]:
    """Selector labels shared by a workload, its pods and its Services."""
    return {SELECTOR_LABEL: name}


def labels_with_networks(name: str, networks: list[str]) -> dict[str, str]:
    labels = base_labels(name)
    for network in networks:
        labels[f"{NETWORK_LABEL_PREFIX}{network}"] = "true"
    return labels


def object_labels(name: str, service: ServiceConfig) -> dict[str, str]:
    """Base labels plus the service's own labels, minus converter directives."""
    labels = {
        k: v
        for k, v in service.labels.items()
        if not k.startswith(DIRECTIVE_LABEL_PREFIX)
    }
    labels.update(base_labels(name))
    return labels


# ---------------------------------------------------------------------------
# Durations and quantities
# ---------------------------------------------------------------------------

_DURATION_UNITS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_QUANTITY = re.compile(
    r"^[+-]?(\d+(\.\d*)?|\.\d+)(Ki|Mi|Gi|Ti|Pi|Ei|[numkMGTPE]|[eE][+-]?\d+)?$"
)

_BINARY_SUFFIXES: Final[list[tuple[str, int]]] = [
    ("Gi", 1 << 30),
    ("Mi", 1 << 20),
    ("Ki", 1 << 10),
]


def parse_duration(value: str) -> int:
    """
    Convert a duration such as `90s`, `1m30s`, `1.5h` or `300ms` into whole
    seconds (truncated).

    Raises:
        ValueError: if `value` is not a valid duration.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return 0

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration '{value}'")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0:
        raise ValueError(f"invalid duration '{value}'")
    return int(sign * total)


def is_quantity(value: str) -> bool:
    """True when `value` is a well-formed resource quantity (`1Gi`, `500m`)."""
    return bool(_QUANTITY.match(value.strip()))


def memory_quantity(num_bytes: int) -> str:
    for suffix, factor in _BINARY_SUFFIXES:
        if num_bytes % factor == 0:
            return f"{num_bytes // factor}{suffix}"
    return str(num_bytes)


def cpu_quantity(millicores: int) -> str:
    if millicores % 1000 == 0:
        return str(millicores // 1000)
    return f"{millicores}m"
