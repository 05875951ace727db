"""kubesynth: synthesize Kubernetes objects from a normalized service model."""

__version__ = "0.1.0"
