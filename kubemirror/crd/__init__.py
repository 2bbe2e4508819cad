"""Typed custom resource schemas and their deep-merge algebra."""

from kubemirror.crd.merge import DeepMerge, merged
from kubemirror.crd.project import (
    PROJECT_DESCRIPTOR,
    ContainerResourceLimit,
    NamespaceResourceQuota,
    ProjectResourceQuota,
    ProjectSpec,
    ResourceQuotaLimit,
)

__all__ = [
    "ContainerResourceLimit",
    "DeepMerge",
    "NamespaceResourceQuota",
    "PROJECT_DESCRIPTOR",
    "ProjectResourceQuota",
    "ProjectSpec",
    "ResourceQuotaLimit",
    "merged",
]
