from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from llmfunction.validation import Violation


class LLMFunctionError(Exception):
    """Base exception class for llmfunction errors."""


class LLMFunctionValidationError(LLMFunctionError):
    """Raised when inputs fail validation."""


class FunctionValidationError(LLMFunctionValidationError):
    """Raised by the strict constructor when function attributes are invalid."""

    def __init__(self, violations: "tuple[Violation, ...]") -> None:
        self.violations = violations
        details = "; ".join(f"{v.field}: {v.message}" for v in violations)
        super().__init__(f"Invalid function definition: {details}")


class LLMFunctionRuntimeError(LLMFunctionError):
    """Raised when runtime execution fails unexpectedly."""


class NotExecutableError(LLMFunctionRuntimeError):
    """Raised when a function without a bound callable is executed."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Function {name!r} has no callable to execute")


__all__ = [
    "LLMFunctionError",
    "LLMFunctionValidationError",
    "FunctionValidationError",
    "LLMFunctionRuntimeError",
    "NotExecutableError",
]
