"""
Defaulting of Cluster specifications.

The defaulter runs once, when a Cluster is created, before the object is
persisted. It only fills fields the user left unset and never fails, so
running it on an already defaulted spec is a no-op.
"""

import logging

from postgres_operator.constants import (
    DEFAULT_APP_DATABASE,
    PRIMARY_UPDATE_STRATEGY_UNSUPERVISED,
)
from postgres_operator.models.cluster import (
    BootstrapConfiguration,
    BootstrapInitDB,
    ClusterSpec,
)
from postgres_operator.utils.images import (
    ImageVersionError,
    PostgresVersion,
    get_image_version,
)
from postgres_operator.utils.postgres_config import (
    DEFAULT_CONFIGURATION,
    ConfigurationDefaults,
    fill_configuration,
)

logger = logging.getLogger(__name__)


class ClusterDefaulter:
    """
    Applies operator defaults to a ClusterSpec.

    Defaults:
    - initdb bootstrap of an "app" database owned by "app"
    - initdb owner equal to the database name
    - the operator's default PostgreSQL image
    - the "unsupervised" primary update strategy
    - baseline PostgreSQL parameters for the image's major version
    """

    def __init__(
        self,
        default_image: str,
        configuration_defaults: ConfigurationDefaults = DEFAULT_CONFIGURATION,
    ):
        """
        Initialize the defaulter.

        Args:
            default_image: Image used when the spec does not set imageName
            configuration_defaults: Baseline PostgreSQL parameters
        """
        self.default_image = default_image
        self.configuration_defaults = configuration_defaults

    def default(self, spec: ClusterSpec) -> ClusterSpec:
        """
        Return a copy of the spec with every default applied.

        The input spec is left untouched.
        """
        defaulted = spec.model_copy(deep=True)

        self._default_bootstrap(defaulted)

        if not defaulted.image_name:
            defaulted.image_name = self.default_image

        if not defaulted.primary_update_strategy:
            defaulted.primary_update_strategy = PRIMARY_UPDATE_STRATEGY_UNSUPERVISED

        defaulted.postgres_configuration.parameters = fill_configuration(
            defaulted.parameters,
            self._postgres_version(defaulted.image_name),
            self.configuration_defaults,
        )

        return defaulted

    def _default_bootstrap(self, spec: ClusterSpec) -> None:
        if spec.bootstrap is None or not spec.bootstrap.methods:
            spec.bootstrap = BootstrapConfiguration(
                initdb=BootstrapInitDB(
                    database=DEFAULT_APP_DATABASE, owner=DEFAULT_APP_DATABASE
                )
            )
            return

        initdb = spec.bootstrap.initdb
        if initdb is None:
            return

        if not initdb.database and not initdb.owner:
            initdb.database = DEFAULT_APP_DATABASE
            initdb.owner = DEFAULT_APP_DATABASE
        elif initdb.database and not initdb.owner:
            initdb.owner = initdb.database

    def _postgres_version(self, image_name: str) -> PostgresVersion | None:
        try:
            return get_image_version(image_name)
        except ImageVersionError as e:
            logger.debug(
                f"Using version independent configuration defaults for {image_name}: {e}"
            )
            return None
