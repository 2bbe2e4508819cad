"""kubemirror: resilient local mirror of one Kubernetes resource type."""

__version__ = "0.1.0"
