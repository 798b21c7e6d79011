import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode, set_span_in_context

from llmfunction import Function, NotExecutableError
from llmfunction.executor import FunctionExecutor, LoggingFunctionExecutor
from llmfunction.tracing import set_trace_ctx


class FakeLogger:
    def __init__(self):
        self.info_messages: list[str] = []
        self.success_messages: list[str] = []
        self.exception_messages: list[str] = []

    def info(self, msg: str, /, **_: object) -> None:
        self.info_messages.append(msg)

    def success(self, msg: str, /, **_: object) -> None:
        self.success_messages.append(msg)

    def exception(self, msg: str, /, **_: object) -> None:
        self.exception_messages.append(msg)


class BrokenLogger:
    def info(self, msg: str, /, **_: object) -> None:
        raise OSError("log sink unavailable")

    def success(self, msg: str, /, **_: object) -> None:
        raise OSError("log sink unavailable")

    def exception(self, msg: str, /, **_: object) -> None:
        raise OSError("log sink unavailable")


class StepTimer:
    def __init__(self, *ticks: float):
        self._ticks = iter(ticks)

    def __call__(self) -> float:
        return next(self._ticks)


def increment(args: dict, ctx: object) -> int:
    return args["value"] + 1


def unreliable(args: dict, ctx: object) -> int:
    raise RuntimeError("expected failure")


class Unprintable:
    def __str__(self) -> str:
        raise ValueError("cannot render")

    __repr__ = __str__


def unprintable(args: object, ctx: object) -> Unprintable:
    return Unprintable()


def build_function(name: str, func=None) -> Function:
    return Function.new_strict({"name": name, "function": func})


@pytest.fixture
def exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def provider(exporter: InMemorySpanExporter) -> TracerProvider:
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return provider


def test_executor_records_span_per_call(
    provider: TracerProvider, exporter: InMemorySpanExporter
) -> None:
    executor = FunctionExecutor(tracer=provider.get_tracer("test"))

    result = executor.execute(build_function("increment", increment), {"value": 2})

    assert result == 3
    [span] = exporter.get_finished_spans()
    assert span.name == "function.increment"
    assert span.kind == SpanKind.INTERNAL
    assert span.attributes["function.name"] == "increment"
    assert span.attributes["function.has_context"] is False


def test_executor_marks_span_on_failure(
    provider: TracerProvider, exporter: InMemorySpanExporter
) -> None:
    executor = FunctionExecutor(tracer=provider.get_tracer("test"))

    with pytest.raises(RuntimeError, match="expected failure"):
        executor.execute(build_function("unreliable", unreliable), {}, {"user": 1})

    [span] = exporter.get_finished_spans()
    assert span.status.status_code == StatusCode.ERROR
    assert span.attributes["function.has_context"] is True
    assert [event.name for event in span.events] == ["exception"]


def test_executor_parents_span_on_trace_ctx(
    provider: TracerProvider, exporter: InMemorySpanExporter
) -> None:
    tracer = provider.get_tracer("test")
    executor = FunctionExecutor(tracer=tracer)
    parent = tracer.start_span("agent.run")
    set_trace_ctx(set_span_in_context(parent))
    try:
        executor.execute(build_function("increment", increment), {"value": 1})
    finally:
        set_trace_ctx(None)
        parent.end()

    spans = {span.name: span for span in exporter.get_finished_spans()}
    child = spans["function.increment"]
    assert child.parent is not None
    assert child.parent.span_id == parent.get_span_context().span_id


def test_executor_raises_not_executable_without_span(
    provider: TracerProvider, exporter: InMemorySpanExporter
) -> None:
    executor = FunctionExecutor(tracer=provider.get_tracer("test"))

    with pytest.raises(NotExecutableError):
        executor.execute(build_function("ping"), {})

    assert exporter.get_finished_spans() == ()


def test_logging_executor_logs_successful_calls() -> None:
    logger = FakeLogger()
    timer = StepTimer(10.0, 10.5)
    executor = LoggingFunctionExecutor(logger=logger, timer=timer)

    result = executor.execute(build_function("increment", increment), {"value": 2})

    assert result == 3
    assert logger.info_messages == ["Function increment starting with {'value': 2}"]
    assert logger.success_messages == [
        "Function increment finished in 0.50s, result: 3"
    ]
    assert logger.exception_messages == []


def test_logging_executor_logs_and_reraises_failures() -> None:
    logger = FakeLogger()
    timer = StepTimer(5.0, 6.25)
    executor = LoggingFunctionExecutor(logger=logger, timer=timer)

    with pytest.raises(RuntimeError, match="expected failure"):
        executor.execute(build_function("unreliable", unreliable), {"value": 1})

    assert logger.exception_messages == ["Function unreliable failed after 1.25s"]
    assert logger.success_messages == []


def test_logging_executor_logs_not_executable() -> None:
    logger = FakeLogger()
    executor = LoggingFunctionExecutor(logger=logger, timer=StepTimer(1.0, 1.0))

    with pytest.raises(NotExecutableError):
        executor.execute(build_function("ping"), {})

    assert logger.exception_messages == ["Function ping failed after 0.00s"]


def test_logging_executor_survives_broken_logger() -> None:
    executor = LoggingFunctionExecutor(logger=BrokenLogger(), timer=StepTimer(0, 1))

    result = executor.execute(build_function("increment", increment), {"value": 4})

    assert result == 5


def test_logging_executor_survives_broken_logger_on_failure() -> None:
    executor = LoggingFunctionExecutor(logger=BrokenLogger(), timer=StepTimer(0, 1))

    with pytest.raises(RuntimeError, match="expected failure"):
        executor.execute(build_function("unreliable", unreliable), {"value": 1})


def test_logging_executor_survives_unprintable_result() -> None:
    logger = FakeLogger()
    executor = LoggingFunctionExecutor(logger=logger, timer=StepTimer(0, 1))

    result = executor.execute(build_function("unprintable", unprintable), {})

    assert isinstance(result, Unprintable)
    assert len(logger.info_messages) == 1
    assert logger.success_messages == []


def test_logging_executor_survives_unprintable_arguments() -> None:
    logger = FakeLogger()
    executor = LoggingFunctionExecutor(logger=logger, timer=StepTimer(2.0, 2.5))
    fn = build_function("ignore_args", lambda args, ctx: "done")

    result = executor.execute(fn, Unprintable())

    assert result == "done"
    assert logger.info_messages == []
    assert logger.success_messages == [
        "Function ignore_args finished in 0.50s, result: done"
    ]
