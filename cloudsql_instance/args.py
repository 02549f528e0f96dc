from typing import Dict, List, Optional, TypedDict, Union

from pulumi import Input

# Values the resolver branches on must be plain Python values. Values that are
# only passed through to the provider (project, network, keys) may be Inputs.

FlagValue = Union[str, int, float, bool]


class AllocatedIpRanges(TypedDict, total=False):
    primary: str
    replica: str


class PsaConfig(TypedDict, total=False):
    private_network: Input[str]
    allocated_ip_ranges: AllocatedIpRanges


class Connectivity(TypedDict, total=False):
    public_ipv4: bool
    psa_config: Optional[PsaConfig]
    psc_allowed_consumer_projects: Optional[List[str]]
    enable_private_path_for_services: bool


class NetworkConfigArgs(TypedDict, total=False):
    authorized_networks: Dict[str, str]
    connectivity: Connectivity


class BackupConfigurationArgs(TypedDict, total=False):
    enabled: bool
    binary_log_enabled: bool
    start_time: str
    location: Optional[str]
    log_retention_days: int
    point_in_time_recovery_enabled: Optional[bool]
    retention_count: int


class InsightsConfigArgs(TypedDict, total=False):
    query_string_length: int
    record_application_tags: bool
    record_client_address: bool
    query_plans_per_minute: int


class MaintenanceWindowArgs(TypedDict, total=False):
    day: int
    hour: int
    update_track: Optional[str]


class DenyMaintenancePeriodArgs(TypedDict, total=False):
    start_date: str
    end_date: str
    start_time: str


class MaintenanceConfigArgs(TypedDict, total=False):
    maintenance_window: MaintenanceWindowArgs
    deny_maintenance_period: DenyMaintenancePeriodArgs


class ReplicaArgs(TypedDict, total=False):
    region: str
    encryption_key_name: Optional[Input[str]]
    additional_flags: Dict[str, FlagValue]
    availability_type: Optional[str]


class UserArgs(TypedDict, total=False):
    password: Optional[Input[str]]
    type: str


class SslArgs(TypedDict, total=False):
    client_certificates: List[str]
    mode: Optional[str]


class CloudSQLInstanceArgs(TypedDict, total=False):
    project_id: Input[str]
    region: str
    name: str
    prefix: Optional[str]
    database_version: str
    tier: str
    edition: str
    availability_type: str
    activation_policy: str
    network_config: NetworkConfigArgs
    replicas: Dict[str, ReplicaArgs]
    users: Dict[str, UserArgs]
    databases: List[str]
    flags: Dict[str, FlagValue]
    labels: Dict[str, str]
    backup_configuration: BackupConfigurationArgs
    insights_config: Optional[InsightsConfigArgs]
    maintenance_config: MaintenanceConfigArgs
    encryption_key_name: Optional[Input[str]]
    root_password: Optional[Input[str]]
    disk_size: Optional[int]
    disk_type: str
    disk_autoresize_limit: int
    data_cache: bool
    collation: Optional[str]
    connector_enforcement: Optional[str]
    time_zone: Optional[str]
    ssl: SslArgs
    gcp_deletion_protection: bool
    deletion_protection: bool
