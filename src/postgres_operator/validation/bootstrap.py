"""
Bootstrap rules.

Validates the selection of the bootstrap method (initdb or recovery), the
initdb application database, the superuser secret reference and the
point-in-time recovery target.
"""

import logging
import re

from postgres_operator.constants import MAX_TIMELINE_ID, TIMELINE_KEYWORDS
from postgres_operator.models.cluster import ClusterSpec
from postgres_operator.models.field_errors import FieldError, FieldErrorList, FieldPath

logger = logging.getLogger(__name__)

BOOTSTRAP_PATH = FieldPath.root("spec", "bootstrap")
RECOVERY_TARGET_PATH = BOOTSTRAP_PATH.child("recovery", "recoveryTarget")

_SIGNED_INTEGER = re.compile(r"-?[0-9]+")


def validate_bootstrap_method(spec: ClusterSpec) -> FieldErrorList:
    """At most one bootstrap method can be configured."""
    if spec.bootstrap is None:
        return []

    methods = spec.bootstrap.methods
    if len(methods) > 1:
        return [
            FieldError.invalid(
                BOOTSTRAP_PATH,
                "initdb, recovery",
                "Too many bootstrap types specified",
            )
        ]
    return []


def validate_initdb(spec: ClusterSpec) -> FieldErrorList:
    """Database name and owner must be set together or not at all."""
    if spec.bootstrap is None or spec.bootstrap.initdb is None:
        return []

    initdb = spec.bootstrap.initdb
    initdb_path = BOOTSTRAP_PATH.child("initdb")

    if initdb.database and not initdb.owner:
        return [
            FieldError.invalid(
                initdb_path.child("owner"),
                "",
                "You need to specify the database owner user",
            )
        ]
    if initdb.owner and not initdb.database:
        return [
            FieldError.invalid(
                initdb_path.child("database"),
                "",
                "You need to specify the database name",
            )
        ]
    return []


def validate_superuser_secret(spec: ClusterSpec) -> FieldErrorList:
    """A superuser secret reference, if present, must name a secret."""
    if spec.superuser_secret is None:
        return []

    if not spec.superuser_secret.name:
        return [
            FieldError.invalid(
                FieldPath.root("spec", "superuserSecret", "name"),
                "",
                "Superuser secret name must not be empty",
            )
        ]
    return []


def validate_recovery_target(spec: ClusterSpec) -> FieldErrorList:
    """
    Check the point-in-time recovery target.

    Exactly one target selector must be set. The timeline is validated
    independently of the selector.
    """
    if spec.bootstrap is None or spec.bootstrap.recovery is None:
        return []

    target = spec.bootstrap.recovery.recovery_target
    if target is None:
        return []

    result: FieldErrorList = []

    selectors = target.selectors
    if not selectors:
        result.append(
            FieldError.invalid(
                RECOVERY_TARGET_PATH,
                "",
                "A recovery target needs one of targetXID, targetName, targetLSN, "
                "targetTime or targetImmediate",
            )
        )
    elif len(selectors) > 1:
        result.append(
            FieldError.invalid(
                RECOVERY_TARGET_PATH,
                ", ".join(selectors),
                "Recovery target options are mutually exclusive",
            )
        )

    if target.target_tli:
        result.extend(validate_target_timeline(target.target_tli))

    return result


def validate_target_timeline(timeline: str) -> FieldErrorList:
    """
    Check a recovery target timeline.

    Accepted values are "latest", "current" or a positive integer that fits
    a PostgreSQL TimeLineID. Leading zeros are accepted ("007" is 7).
    """
    path = RECOVERY_TARGET_PATH.child("targetTLI")

    if timeline in TIMELINE_KEYWORDS:
        return []

    if not _SIGNED_INTEGER.fullmatch(timeline):
        return [
            FieldError.invalid(
                path,
                timeline,
                "recovery target timeline can be set to 'latest', 'current' "
                "or a positive integer",
            )
        ]

    timeline_id = int(timeline)
    if timeline_id < 1:
        return [
            FieldError.invalid(
                path, timeline, "recovery target timeline must be a positive integer"
            )
        ]
    if timeline_id > MAX_TIMELINE_ID:
        return [
            FieldError.invalid(
                path,
                timeline,
                f"recovery target timeline must not exceed {MAX_TIMELINE_ID}",
            )
        ]

    logger.debug(f"Recovery target timeline {timeline_id} accepted")
    return []
