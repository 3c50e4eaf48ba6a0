"""
Field-scoped validation errors.

Validation rules never raise for policy violations: they return lists of
FieldError values naming the offending field path, so the admission
boundary can report every problem of a submission in one rejection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias


class ErrorType(Enum):
    """Kind of field error, rendered like Kubernetes field errors."""

    INVALID = "Invalid value"
    REQUIRED = "Required value"
    NOT_SUPPORTED = "Unsupported value"
    FORBIDDEN = "Forbidden"
    TOO_LONG = "Too long"


@dataclass(frozen=True)
class FieldPath:
    """
    Path to a field inside a resource, e.g. ``spec.bootstrap.initdb.owner``.

    Map entries are rendered with brackets:
    ``spec.postgresql.parameters[data_directory]``.
    """

    parts: tuple[str, ...] = ()

    @classmethod
    def root(cls, *names: str) -> FieldPath:
        return cls(tuple(names))

    def child(self, *names: str) -> FieldPath:
        return FieldPath(self.parts + names)

    def key(self, key: str) -> FieldPath:
        return FieldPath(self.parts + (f"[{key}]",))

    def __str__(self) -> str:
        rendered = ""
        for part in self.parts:
            if part.startswith("[") or not rendered:
                rendered += part
            else:
                rendered += f".{part}"
        return rendered


@dataclass(frozen=True)
class FieldError:
    """A single validation failure bound to a field path."""

    type: ErrorType
    field: FieldPath
    bad_value: Any = None
    detail: str = ""

    @classmethod
    def invalid(cls, path: FieldPath, value: Any, detail: str) -> FieldError:
        return cls(ErrorType.INVALID, path, value, detail)

    @classmethod
    def required(cls, path: FieldPath, detail: str = "") -> FieldError:
        return cls(ErrorType.REQUIRED, path, None, detail)

    @classmethod
    def not_supported(
        cls, path: FieldPath, value: Any, valid_values: tuple[str, ...] | list[str]
    ) -> FieldError:
        quoted = ", ".join(f'"{v}"' for v in valid_values)
        return cls(
            ErrorType.NOT_SUPPORTED, path, value, f"supported values: {quoted}"
        )

    @classmethod
    def forbidden(cls, path: FieldPath, detail: str) -> FieldError:
        return cls(ErrorType.FORBIDDEN, path, None, detail)

    @classmethod
    def too_long(cls, path: FieldPath, value: Any, max_length: int) -> FieldError:
        return cls(
            ErrorType.TOO_LONG,
            path,
            value,
            f"must have at most {max_length} characters",
        )

    def __str__(self) -> str:
        message = f"{self.field}: {self.type.value}"
        if self.type in (ErrorType.INVALID, ErrorType.NOT_SUPPORTED, ErrorType.TOO_LONG):
            message += f": {self._render_value()}"
        if self.detail:
            message += f": {self.detail}"
        return message

    def _render_value(self) -> str:
        if isinstance(self.bad_value, str):
            return f'"{self.bad_value}"'
        return repr(self.bad_value)


FieldErrorList: TypeAlias = list[FieldError]
