"""
PostgreSQL configuration parameter tables.

Two tables drive the admission layer:

- the baseline parameters merged into every new Cluster by the defaulting
  webhook, partly depending on the PostgreSQL major version;
- the fixed parameters, which are managed by the operator or baked in at
  cluster creation and therefore cannot be changed by an update.
"""

from dataclasses import dataclass, field

from postgres_operator.utils.images import PostgresVersion


@dataclass(frozen=True)
class MajorVersionRange:
    """Half-open range of PostgreSQL versions: lower <= version < upper."""

    lower: int
    upper: int | None = None

    def contains(self, version: PostgresVersion) -> bool:
        if version.number < self.lower:
            return False
        return self.upper is None or version.number < self.upper


@dataclass(frozen=True)
class ConfigurationDefaults:
    """Baseline parameters, global and per version range."""

    global_settings: dict[str, str]
    versioned_settings: dict[MajorVersionRange, dict[str, str]] = field(
        default_factory=dict
    )

    def settings_for(self, version: PostgresVersion | None) -> dict[str, str]:
        """
        Collect the baseline parameters for a PostgreSQL version.

        Args:
            version: Target version, or None when it cannot be determined

        Returns:
            A new dict; range-specific settings are skipped without a version
        """
        settings = dict(self.global_settings)
        if version is not None:
            for version_range, range_settings in self.versioned_settings.items():
                if version_range.contains(version):
                    settings.update(range_settings)
        return settings


DEFAULT_CONFIGURATION = ConfigurationDefaults(
    global_settings={
        "max_parallel_workers": "32",
        "max_replication_slots": "32",
        "max_worker_processes": "32",
        "dynamic_shared_memory_type": "posix",
        "wal_sender_timeout": "5s",
        "wal_receiver_timeout": "5s",
    },
    versioned_settings={
        MajorVersionRange(90600, 130000): {"wal_keep_segments": "32"},
        MajorVersionRange(130000): {"wal_keep_size": "512MB"},
        MajorVersionRange(120000): {"shared_memory_type": "mmap"},
    },
)


def fill_configuration(
    parameters: dict[str, str],
    version: PostgresVersion | None,
    defaults: ConfigurationDefaults = DEFAULT_CONFIGURATION,
) -> dict[str, str]:
    """
    Merge the baseline parameters under the user-provided ones.

    User values always win; the input mapping is not modified.
    """
    merged = defaults.settings_for(version)
    merged.update(parameters)
    return merged


# Parameters the operator manages itself or that define the on-disk layout,
# replication and archiving of the instances.
FIXED_CONFIGURATION_PARAMETERS: frozenset[str] = frozenset(
    {
        "allow_system_table_mods",
        "archive_cleanup_command",
        "archive_command",
        "archive_mode",
        "archive_timeout",
        "bonjour",
        "bonjour_name",
        "cluster_name",
        "config_file",
        "data_directory",
        "data_sync_retry",
        "hba_file",
        "hot_standby",
        "ident_file",
        "jit_provider",
        "listen_addresses",
        "log_destination",
        "log_directory",
        "log_file_mode",
        "log_filename",
        "log_rotation_age",
        "log_rotation_size",
        "log_truncate_on_rotation",
        "logging_collector",
        "port",
        "primary_conninfo",
        "primary_slot_name",
        "promote_trigger_file",
        "recovery_end_command",
        "recovery_min_apply_delay",
        "recovery_target",
        "recovery_target_action",
        "recovery_target_inclusive",
        "recovery_target_lsn",
        "recovery_target_name",
        "recovery_target_time",
        "recovery_target_timeline",
        "recovery_target_xid",
        "restart_after_crash",
        "restore_command",
        "ssl",
        "ssl_ca_file",
        "ssl_cert_file",
        "ssl_ciphers",
        "ssl_crl_file",
        "ssl_dh_params_file",
        "ssl_ecdh_curve",
        "ssl_key_file",
        "ssl_max_protocol_version",
        "ssl_min_protocol_version",
        "ssl_passphrase_command",
        "ssl_passphrase_command_supports_reload",
        "ssl_prefer_server_ciphers",
        "stats_temp_directory",
        "synchronous_standby_names",
        "syslog_facility",
        "syslog_ident",
        "syslog_sequence_numbers",
        "syslog_split_messages",
        "unix_socket_directories",
        "unix_socket_group",
        "unix_socket_permissions",
        "wal_level",
        "wal_log_hints",
    }
)
