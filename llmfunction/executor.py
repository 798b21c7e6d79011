from contextlib import suppress
from time import perf_counter
from typing import TYPE_CHECKING, Any, Callable, TypeAlias

from opentelemetry import trace
from opentelemetry.trace import SpanKind

from llmfunction.errors import NotExecutableError
from llmfunction.tracing import get_trace_ctx

if TYPE_CHECKING:
    from llmfunction.function import Function


class FunctionExecutor:
    def __init__(self, tracer: trace.Tracer | None = None) -> None:
        self._tracer = tracer or trace.get_tracer("llmfunction.executor")

    def execute(
        self, function: "Function", arguments: Any, context: Any = None
    ) -> Any:
        """Call the bound callable with `(arguments, context)` and return its result.

        `arguments` are passed through as decoded from the tool call, they are not
        checked against `parameters_schema`. Errors raised by the callable propagate
        unchanged.
        """
        func = function.function
        if func is None:
            raise NotExecutableError(function.name)

        with self._tracer.start_as_current_span(
            f"function.{function.name}",
            kind=SpanKind.INTERNAL,
            record_exception=True,
            set_status_on_exception=True,
            context=get_trace_ctx(),
            attributes={
                "function.name": function.name,
                "function.has_context": context is not None,
            },
        ):
            return func(arguments, context)


class ILogger:
    def info(self, msg: str, /, **kwargs: Any) -> None: ...

    def success(self, msg: str, /, **kwargs: Any) -> None: ...

    def exception(self, msg: str, /, **kwargs: Any) -> None: ...


ITimer: TypeAlias = Callable[[], float]


class LoggingFunctionExecutor(FunctionExecutor):
    def __init__(
        self,
        logger: ILogger,
        timer: ITimer = perf_counter,
        tracer: trace.Tracer | None = None,
    ) -> None:
        super().__init__(tracer=tracer)
        self.logger = logger
        self.timer = timer

    def _log(self, emit: Callable[[str], None], render: Callable[[], str]) -> None:
        # a broken sink or an unprintable value must never fail the call
        with suppress(Exception):
            emit(render())

    def execute(
        self, function: "Function", arguments: Any, context: Any = None
    ) -> Any:
        name = function.name
        self._log(
            self.logger.info, lambda: f"Function {name} starting with {arguments}"
        )
        start = self.timer()
        try:
            result = super().execute(function, arguments, context)
        except Exception:
            duration = self.timer() - start
            self._log(
                self.logger.exception,
                lambda: f"Function {name} failed after {duration:.2f}s",
            )
            raise
        duration = self.timer() - start
        self._log(
            self.logger.success,
            lambda: f"Function {name} finished in {duration:.2f}s, result: {result}",
        )
        return result


DEFAULT_EXECUTOR = FunctionExecutor()
