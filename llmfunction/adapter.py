"""Shapes sent to OpenAI style function calling APIs."""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ApiSerializable(Protocol):
    def for_api(self) -> dict[str, Any]:
        """Return a new `{"name", "description", "parameters"}` map."""
        ...


def to_api_shape(obj: ApiSerializable) -> dict[str, Any]:
    """Serialize `obj` into a function declaration.

    The result shares no state with `obj`, so callers may mutate or encode it
    freely.
    """
    if not isinstance(obj, ApiSerializable):
        raise TypeError(f"{type(obj).__name__} does not implement `for_api`")
    return obj.for_api()


for_api = to_api_shape


def to_tool_spec(obj: ApiSerializable) -> dict[str, Any]:
    "Wrap a function declaration as a chat completions `tools` entry."
    return {"type": "function", "function": to_api_shape(obj)}


def to_api_list(objs: Iterable[ApiSerializable]) -> list[dict[str, Any]]:
    return [to_api_shape(obj) for obj in objs]
