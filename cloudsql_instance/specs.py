"""
Resolved resource specifications.

These are produced by :func:`cloudsql_instance.resolver.resolve` and consumed by
the component. They hold plain values (or pass-through Pulumi Inputs) and carry
no provider types, so they can be inspected directly in tests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

BUILT_IN = "BUILT_IN"
CLOUD_IAM_USER = "CLOUD_IAM_USER"
CLOUD_IAM_SERVICE_ACCOUNT = "CLOUD_IAM_SERVICE_ACCOUNT"
USER_TYPES = (BUILT_IN, CLOUD_IAM_USER, CLOUD_IAM_SERVICE_ACCOUNT)


@dataclass(frozen=True)
class BackupSpec:
    enabled: bool
    binary_log_enabled: Optional[bool]
    start_time: str
    location: Optional[str]
    log_retention_days: int
    point_in_time_recovery_enabled: Optional[bool]
    retention_count: int


@dataclass(frozen=True)
class InsightsSpec:
    query_string_length: int
    record_application_tags: bool
    record_client_address: bool
    query_plans_per_minute: int


@dataclass(frozen=True)
class IpSpec:
    ipv4_enabled: bool
    private_network: Any
    allocated_ip_range: Optional[str]
    enable_private_path_for_services: bool
    authorized_networks: Tuple[Tuple[str, str], ...]
    psc_allowed_consumer_projects: Optional[Tuple[str, ...]]
    ssl_mode: Optional[str]

    @property
    def psc_enabled(self) -> bool:
        return self.psc_allowed_consumer_projects is not None


@dataclass(frozen=True)
class InstanceSpec:
    key: str
    name: str
    region: str
    project_id: Any
    database_version: str
    tier: str
    edition: str
    availability_type: str
    activation_policy: str
    disk_size: Optional[int]
    disk_type: str
    disk_autoresize: bool
    disk_autoresize_limit: int
    flags: Tuple[Tuple[str, str], ...]
    labels: Dict[str, str]
    ip: IpSpec
    encryption_key_name: Any = None
    backup: Optional[BackupSpec] = None
    insights: Optional[InsightsSpec] = None
    maintenance: Dict[str, Any] = field(default_factory=dict)
    data_cache: bool = False
    collation: Optional[str] = None
    connector_enforcement: Optional[str] = None
    time_zone: Optional[str] = None
    gcp_deletion_protection: bool = True
    deletion_protection: bool = True
    master_instance_name: Optional[str] = None
    root_password: Any = None

    @property
    def is_replica(self) -> bool:
        return self.master_instance_name is not None


@dataclass(frozen=True)
class UserSpec:
    key: str
    name: str
    host: Optional[str]
    type: str
    password: Any = None
    generate_password: bool = False


@dataclass(frozen=True)
class DatabaseSpec:
    name: str
    instance: str


@dataclass(frozen=True)
class SslCertSpec:
    common_name: str
    instance: str


@dataclass(frozen=True)
class ResolvedConfig:
    primary: InstanceSpec
    replicas: List[InstanceSpec]
    users: List[UserSpec]
    databases: List[DatabaseSpec]
    ssl_certs: List[SslCertSpec]

    @property
    def instances(self) -> List[InstanceSpec]:
        """Primary first, then replicas in key order."""
        return [self.primary, *self.replicas]

    @property
    def is_postgres(self) -> bool:
        return self.primary.database_version.startswith("POSTGRES")
