"""Typed spec for the Rancher ``Project`` custom resource.

Field names follow the CRD's camelCase JSON; unset optional fields are
omitted when serialising.  Every schema type supports ``merge_from`` so a
namespace or container default can be layered onto a declared quota
without repeating untouched fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from kubemirror.crd.merge import DeepMerge, merged
from kubemirror.models.resources import DynamicObject, ResourceDescriptor

PROJECT_DESCRIPTOR = ResourceDescriptor(
    group="management.cattle.io",
    version="v3",
    kind="Project",
    plural="projects",
    namespaced=True,
)


@dataclass
class _Spec(DeepMerge, DataClassDictMixin):
    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass
class ResourceQuotaLimit(_Spec):
    """Per-resource quantity limits, all optional."""

    pods: str | None = None
    services: str | None = None
    replication_controllers: str | None = field(
        metadata=field_options(alias="replicationControllers"), default=None
    )
    secrets: str | None = None
    config_maps: str | None = field(metadata=field_options(alias="configMaps"), default=None)
    persistent_volume_claims: str | None = field(
        metadata=field_options(alias="persistentVolumeClaims"), default=None
    )
    services_node_ports: str | None = field(
        metadata=field_options(alias="servicesNodePorts"), default=None
    )
    services_load_balancers: str | None = field(
        metadata=field_options(alias="servicesLoadBalancers"), default=None
    )
    requests_cpu: str | None = field(metadata=field_options(alias="requestsCpu"), default=None)
    requests_memory: str | None = field(metadata=field_options(alias="requestsMemory"), default=None)
    requests_storage: str | None = field(metadata=field_options(alias="requestsStorage"), default=None)
    limits_cpu: str | None = field(metadata=field_options(alias="limitsCpu"), default=None)
    limits_memory: str | None = field(metadata=field_options(alias="limitsMemory"), default=None)


@dataclass
class ContainerResourceLimit(_Spec):
    """Default requests and limits applied to containers."""

    requests_cpu: str | None = field(metadata=field_options(alias="requestsCpu"), default=None)
    requests_memory: str | None = field(metadata=field_options(alias="requestsMemory"), default=None)
    limits_cpu: str | None = field(metadata=field_options(alias="limitsCpu"), default=None)
    limits_memory: str | None = field(metadata=field_options(alias="limitsMemory"), default=None)


@dataclass
class NamespaceResourceQuota(_Spec):
    limit: ResourceQuotaLimit | None = None


@dataclass
class ProjectResourceQuota(_Spec):
    limit: ResourceQuotaLimit | None = None
    used_limit: ResourceQuotaLimit | None = field(metadata=field_options(alias="usedLimit"), default=None)


@dataclass
class ProjectSpec(_Spec):
    """Spec of ``projects.management.cattle.io/v3``."""

    description: str
    enable_project_monitoring: bool = field(metadata=field_options(alias="enableProjectMonitoring"))
    display_name: str | None = field(metadata=field_options(alias="displayName"), default=None)
    cluster_name: str | None = field(metadata=field_options(alias="clusterName"), default=None)
    resource_quota: ProjectResourceQuota | None = field(
        metadata=field_options(alias="resourceQuota"), default=None
    )
    namespace_default_resource_quota: NamespaceResourceQuota | None = field(
        metadata=field_options(alias="namespaceDefaultResourceQuota"), default=None
    )
    container_default_resource_limit: ContainerResourceLimit | None = field(
        metadata=field_options(alias="containerDefaultResourceLimit"), default=None
    )

    @classmethod
    def from_object(cls, obj: DynamicObject) -> ProjectSpec:
        """Parse the ``spec`` of a mirrored Project object."""
        return cls.from_dict(obj.get("spec") or {})

    def with_defaults(self, defaults: ProjectSpec) -> ProjectSpec:
        """Return *defaults* overridden by every field set on this spec."""
        return merged(defaults, self)
