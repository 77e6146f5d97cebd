"""Failure kinds shared by every translator and by the orchestrator."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    OFFLINE = "OFFLINE"
    AUTH_NO_KEY = "AUTH_NO_KEY"
    AUTH_BAD_KEY = "AUTH_BAD_KEY"
    AUTH_PROBLEM = "AUTH_PROBLEM"
    INVALID_LANGUAGES = "INVALID_LANGUAGES"
    NO_LANGUAGES = "NO_LANGUAGES"
    FREE_LIMITS_REACHED = "FREE_LIMITS_REACHED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    OTHER_ERROR = "OTHER_ERROR"


__all__ = ["ErrorKind"]
