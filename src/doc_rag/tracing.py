"""OpenTelemetry tracing for the query pipeline.

One question produces a trace shaped like::

    rag-query
    ├── retrieval      (corpus size, top_k, threshold, hits, best score)
    └── generation     (model name, prompt, answer)

Usage with an OTLP backend such as Arize Phoenix:

    from doc_rag.tracing import configure_tracing, get_tracer, instrument_query_pipeline

    configure_tracing(endpoint="http://localhost:6006/v1/traces", service_name="doc-rag")
    ask = instrument_query_pipeline(service.querying, get_tracer("doc-rag.query"), model_name="gpt-4o")
    answer = ask("What does the contract say about renewals?")

Without an endpoint, spans are printed to stdout.
"""
from __future__ import annotations

from typing import Callable

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor, SpanExporter

from .qa import Generator
from .schema import QueryAnswer, RetrievalResult

# OpenInference semantic-convention attribute names
ATTR_INPUT_VALUE = "input.value"
ATTR_OUTPUT_VALUE = "output.value"
ATTR_LLM_MODEL_NAME = "llm.model_name"
ATTR_RETRIEVAL_DOCUMENTS = "retrieval.documents"

# doc_rag specific attributes
ATTR_CORPUS_SIZE = "retrieval.corpus_size"
ATTR_TOP_K = "retrieval.top_k"
ATTR_MIN_SCORE = "retrieval.min_score"
ATTR_TOP_SCORE = "retrieval.top_score"

_provider: TracerProvider | None = None


def configure_tracing(
    endpoint: str | None = None,
    service_name: str = "doc-rag",
    exporter: SpanExporter | None = None,
) -> TracerProvider:
    """Create and register the global TracerProvider.

    Args:
        endpoint: OTLP HTTP endpoint (e.g. ``http://localhost:6006/v1/traces``).
            Ignored when *exporter* is given.
        service_name: Service label shown in the tracing backend.
        exporter: Pre-built exporter, e.g. ``InMemorySpanExporter`` in tests.

    Returns:
        The configured provider, also installed as the global OTel provider.
    """
    global _provider

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))

    if exporter is not None:
        chosen_exporter: SpanExporter = exporter
    elif endpoint is not None:
        try:
            from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
                OTLPSpanExporter,
            )
        except ImportError as exc:  # pragma: no cover
            raise ImportError(
                "opentelemetry-exporter-otlp-proto-http is required to export "
                "traces to an OTLP endpoint.  Install it with:\n"
                "  pip install 'doc-rag[otlp]'"
            ) from exc
        chosen_exporter = OTLPSpanExporter(endpoint=endpoint)
    else:
        chosen_exporter = ConsoleSpanExporter()

    # Synchronous export so spans are visible as soon as a request returns.
    provider.add_span_processor(SimpleSpanProcessor(chosen_exporter))
    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def get_tracer(name: str) -> trace.Tracer:
    """Tracer from the provider set by `configure_tracing`, or the no-op global one."""
    if _provider is not None:
        return _provider.get_tracer(name)
    return trace.get_tracer(name)


def traced_retrieval(
    retriever: Callable[..., RetrievalResult],
    tracer: trace.Tracer,
) -> Callable[..., RetrievalResult]:
    """Wrap a retrieve function so each ranking pass is recorded as a span.

    The wrapper takes the same arguments as `retrieval.retrieve`.
    """

    def _wrapped(query_vector, corpus, top_k: int = 5, min_score: float | None = None) -> RetrievalResult:
        with tracer.start_as_current_span("retrieval") as span:
            span.set_attribute(ATTR_CORPUS_SIZE, len(corpus))
            span.set_attribute(ATTR_TOP_K, top_k)
            if min_score is not None:
                span.set_attribute(ATTR_MIN_SCORE, min_score)
            try:
                result = retriever(query_vector, corpus, top_k=top_k, min_score=min_score)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            span.set_attribute(ATTR_RETRIEVAL_DOCUMENTS, len(result))
            if not result.is_empty:
                span.set_attribute(ATTR_TOP_SCORE, result.candidates[0].score)
            span.set_status(trace.StatusCode.OK)
            return result

    return _wrapped


class TracedGenerator:
    """Generator wrapper that records each chat completion as a span."""

    def __init__(self, generator: Generator, tracer: trace.Tracer, model_name: str = ""):
        self.generator = generator
        self.tracer = tracer
        self.model_name = model_name

    def generate(self, prompt: str, max_tokens: int = 500, temperature: float = 0.2) -> str:
        with self.tracer.start_as_current_span("generation") as span:
            span.set_attribute(ATTR_INPUT_VALUE, prompt)
            if self.model_name:
                span.set_attribute(ATTR_LLM_MODEL_NAME, self.model_name)
            try:
                answer = self.generator.generate(prompt, max_tokens=max_tokens, temperature=temperature)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            span.set_attribute(ATTR_OUTPUT_VALUE, answer[:500])
            span.set_status(trace.StatusCode.OK)
            return answer


def instrument_query_pipeline(pipeline, tracer: trace.Tracer, model_name: str = "") -> Callable[[str], QueryAnswer]:
    """Trace a `QueryPipeline` in place and return a traced `query` callable.

    The pipeline's retriever and generator are swapped for traced wrappers,
    so the child spans also appear when `pipeline.query` is called directly.

    Args:
        pipeline: Query pipeline to instrument.
        tracer: Tracer shared by the parent and child spans.
        model_name: Chat model name attached to the generation span.

    Returns:
        A callable ``(question) -> QueryAnswer`` running under a ``rag-query`` span.
    """
    pipeline.retriever = traced_retrieval(pipeline.retriever, tracer)
    pipeline.generator = TracedGenerator(pipeline.generator, tracer, model_name=model_name)

    def _query(question: str) -> QueryAnswer:
        with tracer.start_as_current_span("rag-query") as span:
            span.set_attribute(ATTR_INPUT_VALUE, question)
            try:
                answer = pipeline.query(question)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            span.set_attribute(ATTR_OUTPUT_VALUE, answer.answer[:500])
            span.set_attribute(ATTR_RETRIEVAL_DOCUMENTS, len(answer.ranked_chunks))
            return answer

    return _query
