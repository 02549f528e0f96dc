import pulumi
from cloudsql_instance import CloudSQLInstance

# Get some provider-namespaced configuration values
gcp_config = pulumi.Config("gcp")
config = pulumi.Config("cloudsql")

args = {
    "project_id": config.get("project") or gcp_config.require("project"),
    "region": config.get("region") or gcp_config.get("region", "us-central1"),
    "name": config.require("name"),
    "prefix": config.get("prefix"),
    "database_version": config.require("databaseVersion"),
    "tier": config.get("tier", "db-g1-small"),
    "edition": config.get("edition"),
    "availability_type": config.get("availabilityType"),
    "network_config": config.require_object("networkConfig"),
    "replicas": config.get_object("replicas"),
    "users": config.get_object("users"),
    "databases": config.get_object("databases"),
    "flags": config.get_object("flags"),
    "labels": config.get_object("labels"),
    "backup_configuration": config.get_object("backupConfiguration"),
    "insights_config": config.get_object("insightsConfig"),
    "maintenance_config": config.get_object("maintenanceConfig"),
    "ssl": config.get_object("ssl"),
    "encryption_key_name": config.get("encryptionKeyName"),
    "root_password": config.get_secret("rootPassword"),
    "disk_size": config.get_int("diskSize"),
    "disk_type": config.get("diskType"),
    "data_cache": config.get_bool("dataCache"),
    "gcp_deletion_protection": config.get_bool("gcpDeletionProtection"),
    "deletion_protection": config.get_bool("deletionProtection"),
}

# unset keys fall back to the component defaults
db = CloudSQLInstance(config.get("resourceName", "cloudsql"),
    {k: v for k, v in args.items() if v is not None})

pulumi.export("connection_name", db.connection_name)
pulumi.export("connection_names", db.connection_names)
pulumi.export("ip", db.ip)
pulumi.export("ips", db.ips)
pulumi.export("public_ip", db.public_ip)
pulumi.export("dns_name", db.dns_name)
pulumi.export("dns_names", db.dns_names)
pulumi.export("id", db.id)
pulumi.export("ids", db.ids)
pulumi.export("self_link", db.self_link)
pulumi.export("self_links", db.self_links)
pulumi.export("name", db.name)
pulumi.export("names", db.names)
pulumi.export("psc_service_attachment_link", db.psc_service_attachment_link)
pulumi.export("psc_service_attachment_links", db.psc_service_attachment_links)
pulumi.export("user_passwords", db.user_passwords)
pulumi.export("postgres_client_certificates", db.postgres_client_certificates)
