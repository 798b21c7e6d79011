"""
llmfunction - functions an LLM can call.
"""

__version__ = "0.1.0"

from .adapter import ApiSerializable as ApiSerializable
from .adapter import to_api_shape as to_api_shape
from .adapter import to_tool_spec as to_tool_spec
from .errors import FunctionValidationError as FunctionValidationError
from .errors import NotExecutableError as NotExecutableError
from .executor import FunctionExecutor as FunctionExecutor
from .executor import LoggingFunctionExecutor as LoggingFunctionExecutor
from .function import Function as Function
from .function import execute as execute
from .function import function as function
from .validation import Err as Err
from .validation import Ok as Ok
from .validation import Violation as Violation
