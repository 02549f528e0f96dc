"""
Configuration resolver for the Cloud SQL component.

``resolve`` takes a :class:`~cloudsql_instance.args.CloudSQLInstanceArgs`
mapping and returns a :class:`~cloudsql_instance.specs.ResolvedConfig`. It
performs no I/O and never mutates its input; mappings are walked in sorted key
order so the same input always yields the same specs.

All validation failures raise :class:`~cloudsql_instance.errors.ConfigurationError`
before any resource is declared.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from .args import CloudSQLInstanceArgs
from .errors import ConfigurationError
from .specs import (
    BUILT_IN,
    CLOUD_IAM_SERVICE_ACCOUNT,
    USER_TYPES,
    BackupSpec,
    DatabaseSpec,
    InsightsSpec,
    InstanceSpec,
    IpSpec,
    ResolvedConfig,
    SslCertSpec,
    UserSpec,
)

REQUIRED_FIELDS = ("project_id", "region", "name", "database_version", "tier", "network_config")
VERSION_FAMILIES = ("MYSQL", "POSTGRES", "SQLSERVER")
AVAILABILITY_TYPES = ("ZONAL", "REGIONAL")
EDITIONS = ("ENTERPRISE", "ENTERPRISE_PLUS")
SSL_MODES = ("ALLOW_UNENCRYPTED_AND_ENCRYPTED", "ENCRYPTED_ONLY", "TRUSTED_CLIENT_CERTIFICATE_REQUIRED")
ACTIVATION_POLICIES = ("ALWAYS", "NEVER", "ON_DEMAND")

BACKUP_DEFAULTS = {
    "enabled": False,
    "binary_log_enabled": False,
    "start_time": "23:00",
    "location": None,
    "log_retention_days": 7,
    "point_in_time_recovery_enabled": None,
    "retention_count": 7,
}

INSIGHTS_DEFAULTS = {
    "query_string_length": 1024,
    "record_application_tags": False,
    "record_client_address": False,
    "query_plans_per_minute": 5,
}

SERVICE_ACCOUNT_SUFFIX = ".gserviceaccount.com"
DENY_PERIOD_START_TIME = "00:00:00"


def instance_name(prefix: Optional[str], name: str) -> str:
    """Return ``{prefix}-{name}``, or ``name`` when there is no prefix."""
    return f"{prefix}-{name}" if prefix else name


def is_mysql(database_version: str) -> bool:
    return database_version.startswith("MYSQL")


def is_postgres(database_version: str) -> bool:
    return database_version.startswith("POSTGRES")


def render_flag(value: Any) -> str:
    # Cloud SQL expects on/off for boolean flags
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def _render_flags(flags: Mapping[str, Any]) -> Tuple[Tuple[str, str], ...]:
    return tuple((k, render_flag(flags[k])) for k in sorted(flags))


def _check_choice(field: str, value: Any, choices: Tuple[str, ...]) -> None:
    if value not in choices:
        raise ConfigurationError(field, f"'{value}' is not one of {', '.join(choices)}")


def _check_keys(field: str, settings: Mapping[str, Any], known: Mapping[str, Any]) -> None:
    for key in sorted(settings):
        if key not in known:
            raise ConfigurationError(f"{field}.{key}", "unknown setting")


def validate_required(args: Mapping[str, Any]) -> None:
    for field in REQUIRED_FIELDS:
        if args.get(field) in (None, ""):
            raise ConfigurationError(field, "a value is required")


def validate_network_config(network_config: Mapping[str, Any]) -> Dict[str, Any]:
    """Check that exactly one of PSA or PSC is configured.

    Returns the connectivity block.
    """
    connectivity = network_config.get("connectivity") or {}
    has_psa = connectivity.get("psa_config") is not None
    has_psc = connectivity.get("psc_allowed_consumer_projects") is not None

    if has_psa and has_psc:
        raise ConfigurationError(
            "network_config.connectivity",
            "only one of psa_config or psc_allowed_consumer_projects can be set",
        )
    if not has_psa and not has_psc:
        raise ConfigurationError(
            "network_config.connectivity",
            "one of psa_config or psc_allowed_consumer_projects must be set",
        )
    if has_psa and not connectivity["psa_config"].get("private_network"):
        raise ConfigurationError(
            "network_config.connectivity.psa_config.private_network",
            "a value is required when psa_config is set",
        )
    return dict(connectivity)


def resolve_backup(
    backup_configuration: Optional[Mapping[str, Any]],
    database_version: str,
    has_replicas: bool,
    is_regional: bool,
) -> Optional[BackupSpec]:
    """Return the effective backup configuration, or None if backups are off.

    MySQL replication and MySQL HA both need binary logging, so for MySQL with
    replicas (or REGIONAL availability) backups and binary logs are forced on.
    """
    _check_keys("backup_configuration", backup_configuration or {}, BACKUP_DEFAULTS)
    backup = {**BACKUP_DEFAULTS, **(backup_configuration or {})}
    mysql = is_mysql(database_version)
    forced = mysql and (has_replicas or is_regional)

    if not (backup["enabled"] or forced):
        return None

    binary_log_enabled = None
    if mysql:
        binary_log_enabled = bool(backup["binary_log_enabled"]) or forced

    return BackupSpec(
        enabled=True,
        binary_log_enabled=binary_log_enabled,
        start_time=backup["start_time"],
        location=backup["location"],
        log_retention_days=backup["log_retention_days"],
        point_in_time_recovery_enabled=backup["point_in_time_recovery_enabled"],
        retention_count=backup["retention_count"],
    )


def resolve_insights(insights_config: Optional[Mapping[str, Any]]) -> Optional[InsightsSpec]:
    if insights_config is None:
        return None
    _check_keys("insights_config", insights_config, INSIGHTS_DEFAULTS)
    return InsightsSpec(**{**INSIGHTS_DEFAULTS, **insights_config})


def resolve_maintenance(maintenance_config: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Normalise the maintenance window and deny period.

    Both dates of a deny period are required; its start time defaults to
    midnight.
    """
    maintenance_config = maintenance_config or {}
    _check_keys("maintenance_config", maintenance_config, {"maintenance_window": None, "deny_maintenance_period": None})
    resolved: Dict[str, Any] = {"maintenance_window": None, "deny_maintenance_period": None}

    window = maintenance_config.get("maintenance_window")
    if window:
        _check_keys("maintenance_config.maintenance_window", window, {"day": None, "hour": None, "update_track": None})
        resolved["maintenance_window"] = {
            "day": window.get("day"),
            "hour": window.get("hour"),
            "update_track": window.get("update_track"),
        }

    deny = maintenance_config.get("deny_maintenance_period")
    if deny:
        field = "maintenance_config.deny_maintenance_period"
        _check_keys(field, deny, {"start_date": None, "end_date": None, "start_time": None})
        for date in ("start_date", "end_date"):
            if not deny.get(date):
                raise ConfigurationError(f"{field}.{date}", "a value is required")
        resolved["deny_maintenance_period"] = {
            "start_date": deny["start_date"],
            "end_date": deny["end_date"],
            "start_time": deny.get("start_time") or DENY_PERIOD_START_TIME,
        }
    return resolved


def resolve_users(users: Mapping[str, Mapping[str, Any]], database_version: str) -> List[UserSpec]:
    """Resolve the user map into user specs.

    BUILT_IN users without a password are marked for generation. On MySQL a
    BUILT_IN key of the form ``name@host`` is split into name and host. On
    PostgreSQL the ``.gserviceaccount.com`` suffix is dropped from service
    account users, as Cloud SQL expects.
    """
    resolved = []
    for key in sorted(users):
        user = users[key] or {}
        user_type = user.get("type") or BUILT_IN
        _check_choice(f"users.{key}.type", user_type, USER_TYPES)
        if user_type != BUILT_IN and database_version.startswith("SQLSERVER"):
            raise ConfigurationError(f"users.{key}.type", f"{user_type} users are not supported on SQL Server")
        password = user.get("password")

        name, host = key, None
        if user_type == BUILT_IN and is_mysql(database_version) and "@" in key:
            name, host = key.split("@", 1)
        elif user_type == CLOUD_IAM_SERVICE_ACCOUNT and is_postgres(database_version):
            if key.endswith(SERVICE_ACCOUNT_SUFFIX):
                name = key[: -len(SERVICE_ACCOUNT_SUFFIX)]

        if user_type != BUILT_IN and password is not None:
            raise ConfigurationError(f"users.{key}.password", f"passwords are not supported for {user_type} users")

        resolved.append(
            UserSpec(
                key=key,
                name=name,
                host=host,
                type=user_type,
                password=password,
                generate_password=user_type == BUILT_IN and password is None,
            )
        )
    return resolved


def resolve_databases(databases: List[str], instance: str) -> List[DatabaseSpec]:
    seen = set()
    resolved = []
    for name in databases:
        if not name:
            raise ConfigurationError("databases", "database names cannot be empty")
        if name in seen:
            raise ConfigurationError("databases", f"'{name}' is listed more than once")
        seen.add(name)
        resolved.append(DatabaseSpec(name=name, instance=instance))
    return resolved


def _ip_spec(
    network_config: Mapping[str, Any], connectivity: Mapping[str, Any], ssl_mode: Optional[str], replica: bool
) -> IpSpec:
    psa = connectivity.get("psa_config") or {}
    ranges = psa.get("allocated_ip_ranges") or {}
    psc = connectivity.get("psc_allowed_consumer_projects")
    authorized = network_config.get("authorized_networks") or {}
    return IpSpec(
        ipv4_enabled=bool(connectivity.get("public_ipv4", False)),
        private_network=psa.get("private_network"),
        allocated_ip_range=ranges.get("replica" if replica else "primary"),
        enable_private_path_for_services=bool(connectivity.get("enable_private_path_for_services", False)),
        authorized_networks=tuple((k, authorized[k]) for k in sorted(authorized)),
        psc_allowed_consumer_projects=tuple(psc) if psc is not None else None,
        ssl_mode=ssl_mode,
    )


def resolve(args: CloudSQLInstanceArgs) -> ResolvedConfig:
    """Validate ``args`` and derive every resource spec of the component."""
    validate_required(args)

    database_version = args["database_version"]
    if not database_version.startswith(VERSION_FAMILIES):
        raise ConfigurationError("database_version", f"unsupported database version '{database_version}'")

    availability_type = args.get("availability_type") or "ZONAL"
    _check_choice("availability_type", availability_type, AVAILABILITY_TYPES)
    edition = args.get("edition") or "ENTERPRISE"
    _check_choice("edition", edition, EDITIONS)
    activation_policy = args.get("activation_policy") or "ALWAYS"
    _check_choice("activation_policy", activation_policy, ACTIVATION_POLICIES)
    data_cache = bool(args.get("data_cache", False))
    if data_cache and edition != "ENTERPRISE_PLUS":
        raise ConfigurationError("data_cache", "data cache requires the ENTERPRISE_PLUS edition")

    ssl = args.get("ssl") or {}
    ssl_mode = ssl.get("mode")
    if ssl_mode is not None:
        _check_choice("ssl.mode", ssl_mode, SSL_MODES)

    network_config = args["network_config"]
    connectivity = validate_network_config(network_config)

    replicas = args.get("replicas") or {}
    for key in sorted(replicas):
        replica = replicas[key] or {}
        if key == args["name"]:
            raise ConfigurationError(f"replicas.{key}", "a replica cannot share the primary instance name")
        if not replica.get("region"):
            raise ConfigurationError(f"replicas.{key}.region", "a value is required")
        if replica.get("availability_type") is not None:
            _check_choice(f"replicas.{key}.availability_type", replica["availability_type"], AVAILABILITY_TYPES)

    prefix = args.get("prefix")
    flags = args.get("flags") or {}
    disk_size = args.get("disk_size")

    primary = InstanceSpec(
        key=args["name"],
        name=instance_name(prefix, args["name"]),
        region=args["region"],
        project_id=args["project_id"],
        database_version=database_version,
        tier=args["tier"],
        edition=edition,
        availability_type=availability_type,
        activation_policy=activation_policy,
        disk_size=disk_size,
        disk_type=args.get("disk_type") or "PD_SSD",
        disk_autoresize=disk_size is None,
        disk_autoresize_limit=args.get("disk_autoresize_limit", 0),
        flags=_render_flags(flags),
        labels=dict(args.get("labels") or {}),
        ip=_ip_spec(network_config, connectivity, ssl_mode, replica=False),
        encryption_key_name=args.get("encryption_key_name"),
        backup=resolve_backup(
            args.get("backup_configuration"),
            database_version,
            has_replicas=bool(replicas),
            is_regional=availability_type == "REGIONAL",
        ),
        insights=resolve_insights(args.get("insights_config")),
        maintenance=resolve_maintenance(args.get("maintenance_config")),
        data_cache=data_cache,
        collation=args.get("collation"),
        connector_enforcement=args.get("connector_enforcement"),
        time_zone=args.get("time_zone"),
        gcp_deletion_protection=args.get("gcp_deletion_protection", True),
        deletion_protection=args.get("deletion_protection", True),
        root_password=args.get("root_password"),
    )

    replica_ip = _ip_spec(network_config, connectivity, ssl_mode, replica=True)
    resolved_replicas = []
    for key in sorted(replicas):
        replica = replicas[key] or {}
        resolved_replicas.append(
            InstanceSpec(
                key=key,
                name=instance_name(prefix, key),
                region=replica["region"],
                project_id=primary.project_id,
                database_version=database_version,
                tier=primary.tier,
                edition=primary.edition,
                availability_type=replica.get("availability_type") or primary.availability_type,
                activation_policy=primary.activation_policy,
                disk_size=primary.disk_size,
                disk_type=primary.disk_type,
                disk_autoresize=primary.disk_autoresize,
                disk_autoresize_limit=primary.disk_autoresize_limit,
                flags=_render_flags({**flags, **(replica.get("additional_flags") or {})}),
                labels=primary.labels,
                ip=replica_ip,
                encryption_key_name=replica.get("encryption_key_name"),
                insights=primary.insights,
                maintenance=primary.maintenance,
                data_cache=primary.data_cache,
                collation=primary.collation,
                connector_enforcement=primary.connector_enforcement,
                time_zone=primary.time_zone,
                gcp_deletion_protection=primary.gcp_deletion_protection,
                deletion_protection=primary.deletion_protection,
                master_instance_name=primary.name,
            )
        )

    return ResolvedConfig(
        primary=primary,
        replicas=resolved_replicas,
        users=resolve_users(args.get("users") or {}, database_version),
        databases=resolve_databases(list(args.get("databases") or []), primary.name),
        ssl_certs=[
            SslCertSpec(common_name=cn, instance=primary.name) for cn in ssl.get("client_certificates") or []
        ],
    )
