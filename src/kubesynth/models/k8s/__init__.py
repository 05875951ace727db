"""Pydantic models of the Kubernetes API objects kubesynth emits."""

from .autoscaling import (
    CrossVersionObjectReference,
    HorizontalPodAutoscaler,
    HorizontalPodAutoscalerSpec,
    MetricSpec,
    MetricTarget,
    ResourceMetricSource,
)
from .base import KubeBase, KubeObject, LabelSelector, ObjectMeta, TemplateMeta
from .core import (
    Affinity,
    Capabilities,
    ConfigMapKeySelector,
    ConfigMapVolumeSource,
    Container,
    ContainerPort,
    EmptyDirVolumeSource,
    EnvFromSource,
    EnvVar,
    EnvVarSource,
    ExecAction,
    HostPathVolumeSource,
    HTTPGetAction,
    KeyToPath,
    LocalObjectReference,
    NodeAffinity,
    NodeSelector,
    NodeSelectorRequirement,
    NodeSelectorTerm,
    PersistentVolumeClaimVolumeSource,
    Pod,
    PodSecurityContext,
    PodSpec,
    PodTemplateSpec,
    Probe,
    ResourceRequirements,
    SecurityContext,
    TCPSocketAction,
    TopologySpreadConstraint,
    Volume,
    VolumeMount,
)
from .networking import (
    NetworkPolicy,
    NetworkPolicyIngressRule,
    NetworkPolicyPeer,
    NetworkPolicySpec,
    Service,
    ServicePort,
    ServiceSpec,
)
from .storage import (
    ConfigMap,
    PersistentVolumeClaim,
    PersistentVolumeClaimSpec,
    PersistentVolumeClaimTemplate,
    VolumeResourceRequirements,
)
from .workloads import (
    DaemonSet,
    DaemonSetSpec,
    Deployment,
    DeploymentConfig,
    DeploymentConfigSpec,
    DeploymentConfigStrategy,
    DeploymentSpec,
    DeploymentStrategy,
    StatefulSet,
    StatefulSetSpec,
)

# Workload variants handled by the controller adapter.
WorkloadObject = Deployment | StatefulSet | DaemonSet | Pod | DeploymentConfig

__all__ = [
    "KubeBase",
    "KubeObject",
    "ObjectMeta",
    "TemplateMeta",
    "LabelSelector",
    "Affinity",
    "Capabilities",
    "ConfigMapKeySelector",
    "ConfigMapVolumeSource",
    "Container",
    "ContainerPort",
    "EmptyDirVolumeSource",
    "EnvFromSource",
    "EnvVar",
    "EnvVarSource",
    "ExecAction",
    "HostPathVolumeSource",
    "HTTPGetAction",
    "KeyToPath",
    "LocalObjectReference",
    "NodeAffinity",
    "NodeSelector",
    "NodeSelectorRequirement",
    "NodeSelectorTerm",
    "PersistentVolumeClaimVolumeSource",
    "Pod",
    "PodSecurityContext",
    "PodSpec",
    "PodTemplateSpec",
    "Probe",
    "ResourceRequirements",
    "SecurityContext",
    "TCPSocketAction",
    "TopologySpreadConstraint",
    "Volume",
    "VolumeMount",
    "NetworkPolicy",
    "NetworkPolicyIngressRule",
    "NetworkPolicyPeer",
    "NetworkPolicySpec",
    "Service",
    "ServicePort",
    "ServiceSpec",
    "ConfigMap",
    "PersistentVolumeClaim",
    "PersistentVolumeClaimTemplate",
    "PersistentVolumeClaimSpec",
    "VolumeResourceRequirements",
    "DaemonSet",
    "DaemonSetSpec",
    "Deployment",
    "DeploymentConfig",
    "DeploymentConfigSpec",
    "DeploymentConfigStrategy",
    "DeploymentSpec",
    "DeploymentStrategy",
    "StatefulSet",
    "StatefulSetSpec",
    "CrossVersionObjectReference",
    "HorizontalPodAutoscaler",
    "HorizontalPodAutoscalerSpec",
    "MetricSpec",
    "MetricTarget",
    "ResourceMetricSource",
    "WorkloadObject",
]
