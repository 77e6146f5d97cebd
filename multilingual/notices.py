"""User-facing notices and the notifiers that display them."""

from __future__ import annotations

import logging
from typing import Sequence

from multilingual.errors import ErrorKind

logger = logging.getLogger(__name__)

ALIASES_ADDED = "ALIASES_ADDED"
NO_NEW_ALIASES = "NO_NEW_ALIASES"
NOT_A_FILE = "NOT_A_FILE"

NOTICES = {
    ErrorKind.OFFLINE.value: "You seem to be offline. Title translation needs an internet connection.",
    ErrorKind.AUTH_NO_KEY.value: "No {translator} API key configured. Add one in the settings.",
    ErrorKind.AUTH_BAD_KEY.value: "The {translator} API key is not valid. Check it in the settings.",
    ErrorKind.AUTH_PROBLEM.value: (
        "{translator} refused the request. Check your API key and its permissions."
    ),
    ErrorKind.INVALID_LANGUAGES.value: (
        "{translator} does not support one of the target languages: {languages}."
    ),
    ErrorKind.NO_LANGUAGES.value: "No target languages configured. Add some in the settings.",
    ErrorKind.FREE_LIMITS_REACHED.value: "The free {translator} quota has been used up.",
    ErrorKind.SERVICE_UNAVAILABLE.value: (
        "{translator} is currently unavailable. Please try again later."
    ),
    ErrorKind.OTHER_ERROR.value: "Could not translate the title with {translator}.",
    ALIASES_ADDED: "Added aliases: {aliases}",
    NO_NEW_ALIASES: "No new aliases to add.",
    NOT_A_FILE: "Title translation only works on notes.",
}

_PREFIXES = {
    logging.DEBUG: "[debug]",
    logging.INFO: "[ok]",
    logging.WARNING: "[warn]",
    logging.ERROR: "[error]",
}


def format_notice(
    key: str,
    *,
    translator: str = "",
    languages: Sequence[str] = (),
    aliases: Sequence[str] = (),
) -> str:
    return NOTICES[key].format(
        translator=translator or "the translation service",
        languages=", ".join(languages),
        aliases=", ".join(aliases),
    )


class ConsoleNotifier:
    """Prints notices with the CLI's status prefixes."""

    def notify(self, message: str, level: int) -> None:
        prefix = _PREFIXES.get(level, "[error]" if level > logging.ERROR else "[info]")
        print(f"{prefix} {message}")


class LoggingNotifier:
    """Routes notices to a logger, for hosts without a console."""

    def __init__(self, target: logging.Logger = logger) -> None:
        self._logger = target

    def notify(self, message: str, level: int) -> None:
        self._logger.log(level, message)


__all__ = [
    "ALIASES_ADDED",
    "ConsoleNotifier",
    "LoggingNotifier",
    "NOTICES",
    "NOT_A_FILE",
    "NO_NEW_ALIASES",
    "format_notice",
]
