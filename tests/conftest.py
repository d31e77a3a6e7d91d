import itertools
import os
import sys
import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from engine.spans import Span


TRACE_ID = bytes(range(1, 17))
OTHER_TRACE_ID = bytes(range(101, 117))


def span_id(n: int) -> bytes:
    return n.to_bytes(8, "big")


@pytest.fixture
def trace_id() -> bytes:
    return TRACE_ID


@pytest.fixture
def make_span():
    """Factory for spans on one trace.

    Ids are small integers turned into 8-byte handles; ``clock`` defaults to a
    fresh increasing value so callers only spell out what a test cares about.
    """
    clocks = itertools.count()

    def _make(
        sid: int,
        name: str = "op",
        duration: int = 100,
        parent: int | None = None,
        clock: int | None = None,
        process_id: int = 1,
        thread_id: int = 1,
        start: int = 0,
        attributes: dict | None = None,
        trace: bytes = TRACE_ID,
    ) -> Span:
        return Span.create(
            trace_id=trace,
            span_id=span_id(sid),
            parent_span_id=span_id(parent) if parent is not None else None,
            name=name,
            start_time_nanos=start,
            end_time_nanos=start + duration,
            logical_clock=next(clocks) if clock is None else clock,
            process_id=process_id,
            thread_id=thread_id,
            attributes=attributes,
        )

    return _make
