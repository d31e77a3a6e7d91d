"""
Span package exports.

This package provides the immutable span record consumed by the analyses,
W3C trace context parsing, and the tracer-side span builder.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.spans.record import Span, serialize_map
from engine.spans.context import TraceContext
from engine.spans.builder import SpanBuilder

__all__ = ["Span", "serialize_map", "TraceContext", "SpanBuilder"]
