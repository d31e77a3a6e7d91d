"""
Constants and configuration for Tracewise.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import Dict, List

from pydantic_settings import BaseSettings


# environment variable used to hand the logical clock to forked children
TRACEWISE_LOGICAL_CLOCK_ENV = os.getenv("TRACEWISE_CLOCK_ENV_VAR", "TRACEWISE_LOGICAL_CLOCK")

# W3C trace context variables, checked in order
TRACEPARENT_ENV_VARS: List[str] = ["TRACEPARENT", "OTEL_TRACEPARENT"]

TRACEWISE_RLE_MIN_RUN_LENGTH = int(os.getenv("TRACEWISE_RLE_MIN_RUN_LENGTH", "10"))
TRACEWISE_MAX_PARALLEL_TRACES = int(os.getenv("TRACEWISE_MAX_PARALLEL_TRACES", "4"))

# weight values assigned to severity labels for comparison and ranking
SEVERITY_WEIGHTS: Dict[str, int] = {
    "low": 1,
    "medium": 2,
    "high": 4,
    "critical": 8,
}


class Settings(BaseSettings):
    clock_env_var: str = TRACEWISE_LOGICAL_CLOCK_ENV
    traceparent_env_vars: List[str] = TRACEPARENT_ENV_VARS

    # dominant process detection, percentages of critical-path time
    pattern_dominant_threshold: float = 80.0
    pattern_dominant_high: float = 90.0
    pattern_dominant_critical: float = 95.0
    pattern_dominant_min_processes: int = 2

    # tight loop detection, consecutive repetitions
    pattern_loop_threshold: int = 1000
    pattern_loop_high: int = 10_000
    pattern_loop_critical: int = 100_000

    # transfer bottleneck detection, transfer time as a percentage of compute
    pattern_transfer_threshold: float = 50.0
    pattern_transfer_high: float = 100.0
    pattern_transfer_critical: float = 200.0
    pattern_transfer_markers: List[str] = ["memcpy", "H2D", "D2H"]
    pattern_compute_markers: List[str] = ["kernel", "GPU"]

    # run-length compression
    rle_min_run_length: int = TRACEWISE_RLE_MIN_RUN_LENGTH
    # spacing of synthetic start timestamps per logical clock tick (ns)
    rle_synthetic_tick_ns: int = 1000

    # analyzer tuning
    analyzer_max_parallel_traces: int = TRACEWISE_MAX_PARALLEL_TRACES
    analyzer_round_precision: int = 4

    model_config = {
        "env_prefix": "TRACEWISE_",
        "extra": "ignore",
    }


settings = Settings()
