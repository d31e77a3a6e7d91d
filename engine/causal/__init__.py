"""
Packages for causal analysis of span batches, including causal graph construction with acyclicity validation and critical path computation over the resulting DAG.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.causal.graph import CausalGraph, NodeId
from engine.causal.critical_path import (
    CriticalPathResult,
    find_all_critical_paths,
    find_critical_path,
    topological_sort,
)

__all__ = [
    "CausalGraph", "NodeId",
    "CriticalPathResult", "find_critical_path", "find_all_critical_paths", "topological_sort",
]
