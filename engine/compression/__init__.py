"""
Run-length compression package exports.

This package provides lossless-by-count compression of repeated operations in
a span batch, and expansion of compressed segments back into synthetic spans.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.compression.rle import (
    CompressedTrace,
    RleSegment,
    compress_spans,
    compress_trace,
    decompress_segment,
)

__all__ = ["CompressedTrace", "RleSegment", "compress_spans", "compress_trace", "decompress_segment"]
