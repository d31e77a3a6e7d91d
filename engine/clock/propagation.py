"""
Propagation of the logical clock to traced child processes through an environment variable, so a forked child continues the parent's causal order.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import os
from typing import MutableMapping, Optional

from engine.clock.lamport import LamportClock

log = logging.getLogger(__name__)


def _env_var() -> str:
    from config import settings

    return settings.clock_env_var


def propagate_to_env(clock: LamportClock, environ: MutableMapping[str, str] | None = None) -> int:
    if environ is None:
        environ = os.environ
    current = clock.now()
    environ[_env_var()] = str(current)
    return current


def init_from_env(clock: LamportClock, environ: MutableMapping[str, str] | None = None) -> Optional[int]:
    if environ is None:
        environ = os.environ
    name = _env_var()
    raw = environ.get(name)
    if raw is None:
        log.debug("init_from_env: %s not set; clock starts at %d", name, clock.now())
        return None

    try:
        parent_clock = int(raw.strip())
    except ValueError:
        log.warning("init_from_env: ignoring non-numeric %s=%r", name, raw)
        return None
    if parent_clock < 0:
        log.warning("init_from_env: ignoring negative %s=%r", name, raw)
        return None

    clock.sync(parent_clock)
    log.debug("init_from_env: synced from parent clock %d, now %d", parent_clock, clock.now())
    return parent_clock
