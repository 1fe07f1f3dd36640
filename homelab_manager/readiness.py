# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Bounded readiness polling for dependencies that start asynchronously."""

from __future__ import annotations

import time
from collections.abc import Callable

from tenacity import RetryError, retry, retry_if_result, stop_after_attempt, wait_fixed

from homelab_manager import logger
from homelab_manager.errors import ReadinessTimeout


def wait_until_ready(
    probe: Callable[[], bool],
    max_attempts: int,
    interval: float,
    description: str = "dependency",
    hint: str = "",
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Poll a read-only probe until it reports ready.

    The probe runs at most *max_attempts* times with *interval* seconds
    between runs, so the worst case sleeps ``(max_attempts - 1) * interval``.

    Args:
        probe: Callable returning True once the dependency is ready.
        max_attempts: Maximum number of probe invocations.
        interval: Seconds to wait between probes.
        description: Name of the dependency for messages.
        hint: Troubleshooting text appended to the timeout message.
        sleep: Sleep function, replaceable for tests.

    Returns:
        Number of probe invocations it took to observe readiness.

    Raises:
        ReadinessTimeout: If the probe never succeeded.
    """
    attempts = 0

    @retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda ready: not ready),
        sleep=sleep,
    )
    def _attempt() -> bool:
        nonlocal attempts
        attempts += 1
        ready = probe()
        if not ready:
            logger.debug("%s not ready (attempt %d/%d)", description, attempts, max_attempts)
        return ready

    try:
        _attempt()
    except RetryError as err:
        raise ReadinessTimeout(description, max_attempts, interval, hint) from err
    return attempts
