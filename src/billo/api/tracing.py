from __future__ import annotations

from billo.api.middleware.request_id import get_request_id
from billo.application.use_cases.context import TraceContext
from billo.infrastructure.observability.otel import current_trace_id


def current_trace_context() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())
