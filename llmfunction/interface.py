from collections.abc import Mapping
from typing import Any, Literal, TypeAlias, TypedDict, TypeGuard, TypeVar

from msgspec import Struct
from msgspec.structs import asdict
from typing_extensions import dataclass_transform


@dataclass_transform(frozen_default=True)
class Record(Struct, frozen=True, kw_only=True):
    def asdict(self) -> dict[str, Any]:
        return asdict(self)


class _Missed:
    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> str:
        return "llmfunction.MISSING"


T = TypeVar("T")

Maybe: TypeAlias = T | _Missed

MISSING = _Missed()


def is_present(value: Maybe[T]) -> TypeGuard[T]:
    return value is not MISSING


JSONType = Literal["string", "number", "integer", "boolean", "object", "array", "null"]


class JsonSchema(TypedDict, total=False):
    """Common JSON Schema keywords seen in function parameter schemas.

    Only used for annotations, schemas are never checked against it.
    """

    type: JSONType
    properties: dict[str, Any]
    required: list[str]
    additionalProperties: bool
    items: Any
    enum: list[Any]
    description: str
    default: Any
    anyOf: list[Any]
    oneOf: list[Any]
    allOf: list[Any]


NAME_MAX_LENGTH = 64
"Upper bound on a function name accepted by OpenAI style function calling."


def copy_schema(value: Any) -> Any:
    "Deep copy a schema tree, turning any mapping into a plain `dict`."
    if isinstance(value, Mapping):
        return {key: copy_schema(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [copy_schema(item) for item in value]
    return value


def empty_parameters_schema() -> JsonSchema:
    "The schema advertised for a function that takes no declared parameters."
    return {"type": "object", "properties": {}}
