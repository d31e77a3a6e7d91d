"""
Anti-pattern detection package exports.

This package provides the structural heuristics that flag dominant processes,
tight loops and GPU transfer bottlenecks in an analyzed trace.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.patterns.detection import (
    detect_anti_patterns,
    detect_dominant_process,
    detect_tight_loops,
    detect_transfer_bottleneck,
)

__all__ = [
    "detect_anti_patterns",
    "detect_dominant_process",
    "detect_tight_loops",
    "detect_transfer_bottleneck",
]
