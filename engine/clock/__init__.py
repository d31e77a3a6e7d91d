"""
Logical clock package exports.

This package provides the Lamport clock used to stamp spans with a causal
order, plus helpers that hand its value across a fork through the environment.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.clock.lamport import LamportClock
from engine.clock.propagation import init_from_env, propagate_to_env

__all__ = ["LamportClock", "init_from_env", "propagate_to_env"]
