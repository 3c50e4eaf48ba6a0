"""Cluster name rules."""

import re

from postgres_operator.constants import MAX_CLUSTER_NAME_LENGTH
from postgres_operator.models.field_errors import FieldError, FieldErrorList, FieldPath

NAME_PATH = FieldPath.root("metadata", "name")

# RFC 1123 label, length is checked separately
_DNS_LABEL = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?")


def validate_name(name: str) -> FieldErrorList:
    """
    The cluster name must be a DNS label short enough to derive the names
    of services, secrets and instance pods from it.
    """
    if not name:
        return [FieldError.required(NAME_PATH, "cluster name is required")]

    result: FieldErrorList = []

    if not _DNS_LABEL.fullmatch(name):
        result.append(
            FieldError.invalid(
                NAME_PATH,
                name,
                "a DNS label must consist of lower case alphanumeric characters "
                "or '-', and must start and end with an alphanumeric character",
            )
        )

    if len(name) > MAX_CLUSTER_NAME_LENGTH:
        result.append(FieldError.too_long(NAME_PATH, name, MAX_CLUSTER_NAME_LENGTH))

    return result
