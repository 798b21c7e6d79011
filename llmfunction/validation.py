"""
Accumulating validation for loosely typed attribute maps.

    changeset = (
        Changeset.cast(attrs, {"name": coerce(str), "size": coerce(int)})
        .validate_required("name")
        .validate_length("name", max=64)
    )
    result = changeset.apply(lambda changes: Thing(**changes))

Every rule runs, so an `Err` lists all problems found in `attrs`.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, Literal, Self, TypeAlias, TypeVar

import msgspec

from llmfunction.interface import Record

T = TypeVar("T")

Caster: TypeAlias = Callable[[Any], Any]
"Turns a raw value into a field value, raising TypeError or ValueError on failure."

ViolationReason = Literal["missing", "too_long", "invalid_type"]


class Violation(Record):
    field: str
    """Name of the offending field."""

    reason: ViolationReason
    """Machine readable rule that failed."""

    message: str
    """Human readable explanation."""

    detail: dict[str, Any] = msgspec.field(default_factory=dict)
    """Rule parameters, e.g. `{"max": 64}` for a length rule."""


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    violations: tuple[Violation, ...]

    def errors_on(self, field: str) -> list[Violation]:
        return [v for v in self.violations if v.field == field]

    def as_dict(self) -> dict[str, list[str]]:
        report: dict[str, list[str]] = {}
        for violation in self.violations:
            report.setdefault(violation.field, []).append(violation.message)
        return report


Result: TypeAlias = Ok[T] | Err


def coerce(target: Any) -> Caster:
    "Cast through msgspec in lax mode, e.g. `coerce(int)` accepts `'3'`."

    def caster(value: Any) -> Any:
        try:
            return msgspec.convert(value, type=target, strict=False)
        except msgspec.ValidationError as exc:
            raise TypeError(str(exc)) from exc

    return caster


def ensure_mapping(value: Any) -> Any:
    "Accept any mapping as is, without copying or inspecting it."
    if not isinstance(value, Mapping):
        raise TypeError(f"Expected `object`, got `{type(value).__name__}`")
    return value


def ensure_callable(value: Any) -> Any:
    if not callable(value):
        raise TypeError(f"Expected a callable, got `{type(value).__name__}`")
    return value


class Changeset:
    def __init__(self, changes: dict[str, Any]) -> None:
        self.changes = changes
        self._violations: list[Violation] = []

    @property
    def violations(self) -> tuple[Violation, ...]:
        return tuple(self._violations)

    @property
    def valid(self) -> bool:
        return not self._violations

    def add_error(
        self,
        field: str,
        reason: ViolationReason,
        message: str,
        **detail: Any,
    ) -> Self:
        self._violations.append(
            Violation(field=field, reason=reason, message=message, detail=detail)
        )
        return self

    def has_error(self, field: str) -> bool:
        return any(v.field == field for v in self._violations)

    @classmethod
    def cast(
        cls, attrs: Mapping[str, Any] | None, fields: Mapping[str, Caster]
    ) -> "Changeset":
        "Keep the permitted fields of `attrs` and cast each one, ignoring the rest."
        changeset = cls({})
        if not attrs:
            return changeset

        for field, caster in fields.items():
            if field not in attrs:
                continue
            value = attrs[field]
            if value is None:
                changeset.changes[field] = None
                continue
            try:
                changeset.changes[field] = caster(value)
            except (TypeError, ValueError) as exc:
                changeset.add_error(field, "invalid_type", f"is invalid: {exc}")
        return changeset

    def validate_required(self, *fields: str) -> Self:
        for field in fields:
            if self.has_error(field):
                continue
            value = self.changes.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                self.add_error(field, "missing", "can't be blank")
        return self

    def validate_length(self, field: str, *, max: int) -> Self:
        "Length is `len(value)`, i.e. code points rather than graphemes."
        value = self.changes.get(field)
        if self.has_error(field) or not isinstance(value, str):
            return self
        if len(value) > max:
            self.add_error(
                field,
                "too_long",
                f"should be at most {max} character(s)",
                max=max,
                count=len(value),
            )
        return self

    def apply(self, build: Callable[[dict[str, Any]], T]) -> Result[T]:
        if self._violations:
            return Err(self.violations)
        return Ok(build(dict(self.changes)))
