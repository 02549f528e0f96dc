import pulumi
from typing import Dict, Optional
import pulumi_gcp as gcp
import pulumi_random as random

from .args import CloudSQLInstanceArgs
from .resolver import resolve
from .specs import InstanceSpec, ResolvedConfig

PASSWORD_SPECIAL_CHARS = "!#$%&*()-_=+[]{}<>:?"


def _settings(spec: InstanceSpec) -> gcp.sql.DatabaseInstanceSettingsArgs:
    ip = spec.ip
    backup = None
    if spec.backup is not None:
        backup = gcp.sql.DatabaseInstanceSettingsBackupConfigurationArgs(
            enabled=spec.backup.enabled,
            binary_log_enabled=spec.backup.binary_log_enabled,
            start_time=spec.backup.start_time,
            location=spec.backup.location,
            point_in_time_recovery_enabled=spec.backup.point_in_time_recovery_enabled,
            transaction_log_retention_days=spec.backup.log_retention_days,
            backup_retention_settings=gcp.sql.DatabaseInstanceSettingsBackupConfigurationBackupRetentionSettingsArgs(
                retained_backups=spec.backup.retention_count,
                retention_unit="COUNT",
            ),
        )

    insights = None
    if spec.insights is not None:
        insights = gcp.sql.DatabaseInstanceSettingsInsightsConfigArgs(
            query_insights_enabled=True,
            query_string_length=spec.insights.query_string_length,
            record_application_tags=spec.insights.record_application_tags,
            record_client_address=spec.insights.record_client_address,
            query_plans_per_minute=spec.insights.query_plans_per_minute,
        )

    window = spec.maintenance.get("maintenance_window")
    deny = spec.maintenance.get("deny_maintenance_period")

    return gcp.sql.DatabaseInstanceSettingsArgs(
        tier=spec.tier,
        edition=spec.edition,
        availability_type=spec.availability_type,
        activation_policy=spec.activation_policy,
        collation=spec.collation,
        connector_enforcement=spec.connector_enforcement,
        time_zone=spec.time_zone,
        deletion_protection_enabled=spec.gcp_deletion_protection,
        disk_autoresize=spec.disk_autoresize,
        disk_autoresize_limit=spec.disk_autoresize_limit,
        disk_size=spec.disk_size,
        disk_type=spec.disk_type,
        user_labels=spec.labels,
        ip_configuration=gcp.sql.DatabaseInstanceSettingsIpConfigurationArgs(
            ipv4_enabled=ip.ipv4_enabled,
            private_network=ip.private_network,
            allocated_ip_range=ip.allocated_ip_range,
            enable_private_path_for_google_cloud_services=ip.enable_private_path_for_services,
            ssl_mode=ip.ssl_mode,
            authorized_networks=[
                gcp.sql.DatabaseInstanceSettingsIpConfigurationAuthorizedNetworkArgs(name=name, value=cidr)
                for name, cidr in ip.authorized_networks
            ],
            psc_configs=[
                gcp.sql.DatabaseInstanceSettingsIpConfigurationPscConfigArgs(
                    psc_enabled=True,
                    allowed_consumer_projects=list(ip.psc_allowed_consumer_projects),
                )
            ] if ip.psc_enabled else None,
        ),
        backup_configuration=backup,
        database_flags=[
            gcp.sql.DatabaseInstanceSettingsDatabaseFlagArgs(name=name, value=value)
            for name, value in spec.flags
        ],
        insights_config=insights,
        maintenance_window=gcp.sql.DatabaseInstanceSettingsMaintenanceWindowArgs(
            day=window["day"],
            hour=window["hour"],
            update_track=window["update_track"],
        ) if window else None,
        deny_maintenance_period=gcp.sql.DatabaseInstanceSettingsDenyMaintenancePeriodArgs(
            start_date=deny["start_date"],
            end_date=deny["end_date"],
            time=deny["start_time"],
        ) if deny else None,
        data_cache_config=gcp.sql.DatabaseInstanceSettingsDataCacheConfigArgs(
            data_cache_enabled=True,
        ) if spec.data_cache else None,
    )


class CloudSQLInstance(pulumi.ComponentResource):
    """A Cloud SQL primary instance with optional read replicas, databases and users.

    Every output that describes an instance comes in two shapes: a single value
    for the primary (``connection_name``) and a map keyed by instance for the
    primary plus all replicas (``connection_names``). The primary is keyed by
    its unprefixed ``name``, replicas by their key in ``replicas``.
    """

    def __init__(self, name: str, args: CloudSQLInstanceArgs, opts: Optional[pulumi.ResourceOptions] = None):
        # Fails before anything is registered with the engine
        resolved: ResolvedConfig = resolve(args)
        super().__init__("components:index:CloudSQLInstance", name, None, opts)

        # Copyright 2024 Google LLC
        #
        # Licensed under the Apache License, Version 2.0 (the "License");
        # you may not use this file except in compliance with the License.
        # You may obtain a copy of the License at
        #
        #      http://www.apache.org/licenses/LICENSE-2.0
        #
        # Unless required by applicable law or agreed to in writing, software
        # distributed under the License is distributed on an "AS IS" BASIS,
        # WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
        # See the License for the specific language governing permissions and
        # limitations under the License.

        self.resolved = resolved
        primary_spec = resolved.primary

        pulumi.log.info(
            f"{primary_spec.name}: {primary_spec.database_version}, "
            f"{len(resolved.replicas)} replica(s), {len(resolved.databases)} database(s), "
            f"{len(resolved.users)} user(s)",
            resource=self,
        )
        requested_backup = args.get("backup_configuration") or {}
        if primary_spec.backup is not None and not requested_backup.get("enabled", False):
            pulumi.log.warn(
                f"{primary_spec.name}: backups and binary logging enabled, required for MySQL replication and HA",
                resource=self,
            )

        self.primary = gcp.sql.DatabaseInstance(f"{name}-primary",
            project=primary_spec.project_id,
            name=primary_spec.name,
            region=primary_spec.region,
            database_version=primary_spec.database_version,
            encryption_key_name=primary_spec.encryption_key_name,
            root_password=primary_spec.root_password,
            settings=_settings(primary_spec),
            deletion_protection=primary_spec.deletion_protection,
            opts=pulumi.ResourceOptions(parent=self))

        self.replicas: Dict[str, gcp.sql.DatabaseInstance] = {}
        for spec in resolved.replicas:
            self.replicas[spec.key] = gcp.sql.DatabaseInstance(f"{name}-replica-{spec.key}",
                project=spec.project_id,
                name=spec.name,
                region=spec.region,
                database_version=spec.database_version,
                encryption_key_name=spec.encryption_key_name,
                master_instance_name=self.primary.name,
                settings=_settings(spec),
                deletion_protection=spec.deletion_protection,
                opts=pulumi.ResourceOptions(parent=self, depends_on=[self.primary]))

        self.databases: Dict[str, gcp.sql.Database] = {}
        for spec in resolved.databases:
            self.databases[spec.name] = gcp.sql.Database(f"{name}-db-{spec.name}",
                project=primary_spec.project_id,
                name=spec.name,
                instance=self.primary.name,
                opts=pulumi.ResourceOptions(parent=self))

        self.users: Dict[str, gcp.sql.User] = {}
        user_passwords = {}
        for spec in resolved.users:
            password = spec.password
            if spec.generate_password:
                password = random.RandomPassword(f"{name}-password-{spec.key}",
                    length=16,
                    special=True,
                    override_special=PASSWORD_SPECIAL_CHARS,
                    opts=pulumi.ResourceOptions(parent=self)).result
            if password is not None:
                password = pulumi.Output.secret(password)
                user_passwords[spec.key] = password

            self.users[spec.key] = gcp.sql.User(f"{name}-user-{spec.key}",
                project=primary_spec.project_id,
                name=spec.name,
                host=spec.host,
                type=spec.type,
                password=password,
                instance=self.primary.name,
                opts=pulumi.ResourceOptions(parent=self, depends_on=list(self.replicas.values())))

        self.ssl_certs: Dict[str, gcp.sql.SslCert] = {}
        for spec in resolved.ssl_certs:
            self.ssl_certs[spec.common_name] = gcp.sql.SslCert(f"{name}-cert-{spec.common_name}",
                project=primary_spec.project_id,
                common_name=spec.common_name,
                instance=self.primary.name,
                opts=pulumi.ResourceOptions(parent=self))

        self.instances: Dict[str, gcp.sql.DatabaseInstance] = {primary_spec.key: self.primary, **self.replicas}

        self.connection_name = self.primary.connection_name
        self.connection_names = self._by_instance("connection_name")
        self.ip = self.primary.private_ip_address
        self.ips = self._by_instance("private_ip_address")
        self.public_ip = self.primary.public_ip_address
        self.public_ips = self._by_instance("public_ip_address")
        self.dns_name = self.primary.dns_name
        self.dns_names = self._by_instance("dns_name")
        self.id = self.primary.id
        self.ids = self._by_instance("id")
        self.self_link = self.primary.self_link
        self.self_links = self._by_instance("self_link")
        self.name = self.primary.name
        self.names = self._by_instance("name")
        self.psc_service_attachment_link = self.primary.psc_service_attachment_link
        self.psc_service_attachment_links = self._by_instance("psc_service_attachment_link")
        self.user_passwords = user_passwords
        self.postgres_client_certificates = {
            cn: pulumi.Output.secret(pulumi.Output.all(
                cert=cert.cert,
                private_key=cert.private_key,
                server_ca_cert=cert.server_ca_cert,
            ))
            for cn, cert in self.ssl_certs.items()
        }

        self.register_outputs({
            'connection_name': self.connection_name,
            'connection_names': self.connection_names,
            'ip': self.ip,
            'ips': self.ips,
            'public_ip': self.public_ip,
            'public_ips': self.public_ips,
            'dns_name': self.dns_name,
            'dns_names': self.dns_names,
            'id': self.id,
            'ids': self.ids,
            'self_link': self.self_link,
            'self_links': self.self_links,
            'name': self.name,
            'names': self.names,
            'psc_service_attachment_link': self.psc_service_attachment_link,
            'psc_service_attachment_links': self.psc_service_attachment_links,
            'user_passwords': self.user_passwords,
            'postgres_client_certificates': self.postgres_client_certificates,
        })

    def _by_instance(self, attribute: str) -> Dict[str, pulumi.Output]:
        return {key: getattr(instance, attribute) for key, instance in self.instances.items()}
