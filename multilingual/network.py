"""Connectivity probe used to tell OFFLINE apart from other transport errors."""

from __future__ import annotations

import logging
import socket
from typing import Callable, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PROBE_HOSTS: Sequence[Tuple[str, int]] = (("1.1.1.1", 53), ("8.8.8.8", 53))
DEFAULT_PROBE_TIMEOUT_SECONDS = 2.0

ConnectivityCheck = Callable[[], bool]


def is_online(
    hosts: Sequence[Tuple[str, int]] = DEFAULT_PROBE_HOSTS,
    timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
) -> bool:
    """Return True if a TCP connection to any probe host succeeds."""
    for host, port in hosts:
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError as exc:
            logger.debug(f"Connectivity probe {host}:{port} failed: {exc}")
    return False


__all__ = ["ConnectivityCheck", "is_online"]
