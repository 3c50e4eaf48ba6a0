"""
Validation of Cluster create and update requests.

The validator runs every rule family against the submitted Cluster and,
for updates, the persisted one. It never stops at the first failure: all
field errors are collected in a deterministic order (rule family, then
field) so that a submitter can fix every problem in one iteration.
"""

import logging
from collections.abc import Callable, Set
from dataclasses import dataclass

from postgres_operator.models.cluster import Cluster
from postgres_operator.models.field_errors import FieldErrorList
from postgres_operator.settings import settings
from postgres_operator.utils.postgres_config import FIXED_CONFIGURATION_PARAMETERS
from postgres_operator.validation import (
    validate_bootstrap_method,
    validate_configuration_change,
    validate_image_change,
    validate_image_name,
    validate_initdb,
    validate_instances,
    validate_max_sync_replicas,
    validate_name,
    validate_primary_update_strategy,
    validate_recovery_target,
    validate_storage_configuration,
    validate_storage_size_change,
    validate_superuser_secret,
)

logger = logging.getLogger(__name__)

RULE_FAMILIES = (
    "naming",
    "bootstrap",
    "storage",
    "image",
    "configuration",
    "replication",
)


@dataclass(frozen=True)
class Rule:
    """A named rule bound to the family it reports under."""

    family: str
    name: str
    check: Callable[[Cluster, Cluster | None], FieldErrorList]
    needs_baseline: bool = False


class ClusterValidator:
    """
    Validates Cluster resources on creation and update.

    Rules comparing against the persisted object (storage shrink, image
    downgrade, configuration change) only run on updates.
    """

    def __init__(
        self,
        fixed_parameters: Set[str] = FIXED_CONFIGURATION_PARAMETERS,
        default_image: str | None = None,
    ):
        """
        Initialize the validator.

        Args:
            fixed_parameters: PostgreSQL parameters that cannot change after creation
            default_image: Image assumed for an empty imageName
                (defaults to the operator setting)
        """
        self.fixed_parameters = frozenset(fixed_parameters)
        self.default_image = default_image or settings.postgres_image_name
        self.rules = self._build_rules()

    def _build_rules(self) -> tuple[Rule, ...]:
        return (
            Rule("naming", "name", lambda new, old: validate_name(new.name)),
            Rule(
                "bootstrap",
                "bootstrap_method",
                lambda new, old: validate_bootstrap_method(new.spec),
            ),
            Rule("bootstrap", "initdb", lambda new, old: validate_initdb(new.spec)),
            Rule(
                "bootstrap",
                "superuser_secret",
                lambda new, old: validate_superuser_secret(new.spec),
            ),
            Rule(
                "bootstrap",
                "recovery_target",
                lambda new, old: validate_recovery_target(new.spec),
            ),
            Rule(
                "storage",
                "storage_configuration",
                lambda new, old: validate_storage_configuration(new.spec),
            ),
            Rule(
                "storage",
                "storage_size_change",
                lambda new, old: validate_storage_size_change(new.spec, old.spec),
                needs_baseline=True,
            ),
            Rule("image", "image_name", lambda new, old: validate_image_name(new.spec)),
            Rule(
                "image",
                "image_change",
                lambda new, old: validate_image_change(
                    new.spec, old.spec.image_name, self.default_image
                ),
                needs_baseline=True,
            ),
            Rule(
                "configuration",
                "configuration_change",
                lambda new, old: validate_configuration_change(
                    new.spec, old.spec, self.fixed_parameters, self.default_image
                ),
                needs_baseline=True,
            ),
            Rule(
                "replication", "instances", lambda new, old: validate_instances(new.spec)
            ),
            Rule(
                "replication",
                "max_sync_replicas",
                lambda new, old: validate_max_sync_replicas(new.spec),
            ),
            Rule(
                "replication",
                "primary_update_strategy",
                lambda new, old: validate_primary_update_strategy(new.spec),
            ),
        )

    def validate_by_family(
        self, new: Cluster, old: Cluster | None = None
    ) -> dict[str, FieldErrorList]:
        """
        Run every applicable rule and group the errors by rule family.

        Args:
            new: The submitted Cluster
            old: The persisted Cluster for updates, None for creations

        Returns:
            Errors per family, in rule family order (families without errors
            map to an empty list)
        """
        results: dict[str, FieldErrorList] = {family: [] for family in RULE_FAMILIES}

        for rule in self.rules:
            if rule.needs_baseline and old is None:
                continue
            errors = rule.check(new, old)
            if errors:
                logger.debug(
                    f"Rule {rule.family}/{rule.name} reported {len(errors)} error(s) "
                    f"for cluster {new.name}"
                )
            results[rule.family].extend(errors)

        return results

    def validate(self, new: Cluster, old: Cluster | None = None) -> FieldErrorList:
        """
        Validate a Cluster.

        Returns:
            Every field error found; an empty list means the Cluster is valid
        """
        by_family = self.validate_by_family(new, old)
        return [error for family in RULE_FAMILIES for error in by_family[family]]


def validate_cluster(old: Cluster | None, new: Cluster) -> FieldErrorList:
    """Validate a Cluster with the operator's default configuration."""
    return ClusterValidator().validate(new, old)
