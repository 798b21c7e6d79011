"""
A function an LLM can be told about and can ask to call.

    get_weather = Function.new_strict(
        {
            "name": "get_weather",
            "description": "Get current weather",
            "parameters_schema": {
                "type": "object",
                "properties": {"city": {"type": "string"}},
                "required": ["city"],
            },
            "function": lambda args, ctx: "sunny",
        }
    )

    to_api_shape(get_weather)  # sent to the LLM
    get_weather.execute({"city": "Paris"}, ctx)  # when the LLM calls it back
"""

from inspect import getdoc
from typing import Any, Callable, Mapping, TypeAlias, TypedDict, Unpack, overload

from llmfunction.errors import FunctionValidationError
from llmfunction.executor import DEFAULT_EXECUTOR
from llmfunction.interface import (
    MISSING,
    NAME_MAX_LENGTH,
    JsonSchema,
    Maybe,
    Record,
    copy_schema,
    empty_parameters_schema,
    is_present,
)
from llmfunction.validation import (
    Caster,
    Changeset,
    Err,
    Result,
    coerce,
    ensure_callable,
    ensure_mapping,
)

FunctionBody: TypeAlias = Callable[[Any, Any], Any]
"Receives the decoded tool call arguments and the caller's context."

CREATE_FIELDS: dict[str, Caster] = {
    "name": coerce(str),
    "description": coerce(str),
    "parameters_schema": ensure_mapping,
    "function": ensure_callable,
}
REQUIRED_FIELDS = ("name",)


class Function(Record):
    """
    Build instances with `Function.new` or `Function.new_strict` so the
    attributes are validated, and `replace` to derive a changed copy.
    """

    name: str
    """Name the LLM uses to refer to the function."""

    description: str | None = None
    """What the function does, used by the LLM to decide when to call it."""

    parameters_schema: dict[str, Any] | None = None
    """JSON Schema of the arguments, carried as is."""

    function: FunctionBody | None = None
    """Callable run on `execute`, never part of the API shape."""

    @classmethod
    def changeset(cls, attrs: Mapping[str, Any] | None) -> Changeset:
        return (
            Changeset.cast(attrs, CREATE_FIELDS)
            .validate_required(*REQUIRED_FIELDS)
            .validate_length("name", max=NAME_MAX_LENGTH)
        )

    @classmethod
    def new(cls, attrs: Mapping[str, Any] | None = None) -> Result["Function"]:
        """Build a function, returning `Ok(function)` or `Err(violations)`.

        Keys other than `name`, `description`, `parameters_schema` and
        `function` are ignored.
        """
        return cls.changeset(attrs).apply(lambda changes: cls(**changes))

    @classmethod
    def new_strict(cls, attrs: Mapping[str, Any] | None = None) -> "Function":
        "Build a function or raise `FunctionValidationError`."
        result = cls.new(attrs)
        if isinstance(result, Err):
            raise FunctionValidationError(result.violations)
        return result.value

    def replace(self, **changes: Any) -> "Function":
        return type(self).new_strict(self.asdict() | changes)

    def execute(self, arguments: Any, context: Any = None) -> Any:
        return DEFAULT_EXECUTOR.execute(self, arguments, context)

    def for_api(self) -> dict[str, Any]:
        """`description` is emitted as held, so an empty string stays `""`."""
        parameters: JsonSchema | dict[str, Any]
        if self.parameters_schema is None:
            parameters = empty_parameters_schema()
        else:
            parameters = copy_schema(self.parameters_schema)
        return {
            "name": self.name,
            "description": self.description,
            "parameters": parameters,
        }


def execute(function: Function, arguments: Any, context: Any = None) -> Any:
    return function.execute(arguments, context)


class IFunctionAttrs(TypedDict, total=False):
    name: str
    """
    Defaults to the decorated callable's `__name__`.
    """
    description: str
    """
    Defaults to the decorated callable's docstring.
    """
    parameters_schema: dict[str, Any]


@overload
def function(func: FunctionBody, /) -> Function: ...


@overload
def function(
    **attrs: Unpack[IFunctionAttrs],
) -> Callable[[FunctionBody], Function]: ...


def function(
    func: Maybe[FunctionBody] = MISSING, /, **attrs: Unpack[IFunctionAttrs]
) -> Function | Callable[[FunctionBody], Function]:
    """
    @function(parameters_schema={"type": "object", "properties": {}})
    def ping(args, ctx):
        "Check the service is alive."
        return "pong"
    """

    def build(f: FunctionBody) -> Function:
        defaults = {"name": getattr(f, "__name__", None), "description": getdoc(f)}
        return Function.new_strict(defaults | dict(attrs) | {"function": f})

    if is_present(func):  # bare decorator
        return build(func)
    return build
