"""
Constants used throughout the PostgreSQL operator.

This module defines all constant values used by the admission layer including:
- Custom resource coordinates
- Default values applied by the defaulting webhook
- Naming limits
- PostgreSQL version and timeline bounds
"""

# Custom resource coordinates
API_GROUP = "postgresql.k8s.enterprisedb.io"
API_VERSION = "v1"
CLUSTER_PLURAL = "clusters"
CLUSTER_KIND = "Cluster"

# Default configuration values
DEFAULT_POSTGRES_IMAGE = "quay.io/enterprisedb/postgresql:13.1"
DEFAULT_APP_DATABASE = "app"
DEFAULT_INSTANCES = 1

# Primary update strategies
PRIMARY_UPDATE_STRATEGY_UNSUPERVISED = "unsupervised"
PRIMARY_UPDATE_STRATEGY_SUPERVISED = "supervised"
PRIMARY_UPDATE_STRATEGIES = (
    PRIMARY_UPDATE_STRATEGY_UNSUPERVISED,
    PRIMARY_UPDATE_STRATEGY_SUPERVISED,
)

# Cluster names are DNS labels (max 63 characters). Dependent objects get
# suffixes such as "-rw", "-superuser" or "-<serial>", so the cluster name
# itself must stay well below that.
MAX_CLUSTER_NAME_LENGTH = 50

# Recovery target timeline keywords understood by PostgreSQL
TIMELINE_KEYWORDS = ("latest", "current")
# TimeLineID is a 32-bit unsigned integer in PostgreSQL
MAX_TIMELINE_ID = 4294967295

# Versions below this one use a two-component major (e.g. 9.6)
FIRST_SINGLE_COMPONENT_MAJOR = 10

LATEST_TAG = "latest"

# Operator entry-point copy mode used by the bootstrap subcommand
BOOTSTRAP_EXECUTABLE_MODE = 0o755
