"""Decide whether a note title should be translated automatically."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Mapping, Optional, Tuple

from multilingual.config import EligibilityRules, load_untitled_phrases, untitled_phrase_for

logger = logging.getLogger(__name__)

# Daily notes use this title format unless configured otherwise
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"

# moment.js style tokens understood in date formats, longest first
DATE_TOKEN_RE = re.compile(
    r"\[[^\]]*\]|YYYY|YY|MMMM|MMM|MM|M|dddd|ddd|DD|D|HH|H|hh|h|mm|m|ss|s|A|.",
    re.DOTALL,
)
STRPTIME_CODES = {
    "YYYY": "%Y",
    "YY": "%y",
    "MMMM": "%B",
    "MMM": "%b",
    "MM": "%m",
    "M": "%m",
    "dddd": "%A",
    "ddd": "%a",
    "DD": "%d",
    "D": "%d",
    "HH": "%H",
    "H": "%H",
    "hh": "%I",
    "h": "%I",
    "mm": "%M",
    "m": "%M",
    "ss": "%S",
    "s": "%S",
    "A": "%p",
}
UNPADDED = {"M": "month", "D": "day", "H": "hour", "m": "minute", "s": "second"}


def _tokenize(date_format: str) -> List[Tuple[bool, str]]:
    """Split a date format into (is_token, text) parts."""
    parts: List[Tuple[bool, str]] = []
    for match in DATE_TOKEN_RE.finditer(date_format):
        piece = match.group(0)
        if piece.startswith("[") and piece.endswith("]") and len(piece) > 1:
            parts.append((False, piece[1:-1]))
        else:
            parts.append((piece in STRPTIME_CODES, piece))
    return parts


def _render(value: datetime, parts: List[Tuple[bool, str]]) -> str:
    rendered: List[str] = []
    for is_token, piece in parts:
        if not is_token:
            rendered.append(piece)
        elif piece in UNPADDED:
            rendered.append(str(getattr(value, UNPADDED[piece])))
        elif piece == "h":
            rendered.append(str(value.hour % 12 or 12))
        else:
            rendered.append(value.strftime(STRPTIME_CODES[piece]))
    return "".join(rendered)


def is_date_title(title: str, date_format: Optional[str] = None) -> bool:
    """Strictly parse ``title`` with a moment.js style format.

    Strict means the whole title must match and re-rendering the parsed date
    gives back the same text, so "2024-1-5" is not a "YYYY-MM-DD" date.
    """
    parts = _tokenize(date_format or DEFAULT_DATE_FORMAT)
    pattern = "".join(
        STRPTIME_CODES[piece] if is_token else piece.replace("%", "%%")
        for is_token, piece in parts
    )
    try:
        parsed = datetime.strptime(title, pattern)
    except re.error as exc:
        # strptime compiles a regex; a field used twice is a duplicate group
        logger.warning(f"Ignoring unusable date format {date_format!r}: {exc}")
        return False
    except ValueError:
        return False
    return _render(parsed, parts).casefold() == title.casefold()


def is_ignored_path(path: str, prefix: Optional[str]) -> bool:
    return bool(prefix) and path.startswith(prefix)


def is_untitled(title: str, phrase: str) -> bool:
    """Match the placeholder name of new notes, e.g. "Untitled" or "Untitled 3"."""
    return re.fullmatch(rf"{re.escape(phrase)}( \d+)?", title) is not None


def matches_ignore_regex(title: str, pattern: Optional[str]) -> bool:
    if not pattern:
        return False
    try:
        return re.search(pattern, title) is not None
    except re.error as exc:
        logger.warning(f"Ignoring invalid title regex {pattern!r}: {exc}")
        return False


def ineligibility_reasons(
    title: str,
    path: str,
    rules: EligibilityRules,
    locale: str,
    untitled_phrases: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Return every rule excluding ``title``; an empty list means eligible."""
    phrase = rules.untitled_phrase or untitled_phrase_for(
        locale, untitled_phrases if untitled_phrases is not None else load_untitled_phrases()
    )
    reasons: List[str] = []
    if is_ignored_path(path, rules.ignore_path_prefix):
        reasons.append("path")
    if is_untitled(title, phrase):
        reasons.append("untitled")
    if is_date_title(title, rules.ignore_date_format):
        reasons.append("date")
    if matches_ignore_regex(title, rules.ignore_regex):
        reasons.append("regex")
    return reasons


def is_eligible(
    title: str,
    path: str,
    rules: EligibilityRules,
    locale: str,
    untitled_phrases: Optional[Mapping[str, str]] = None,
) -> bool:
    reasons = ineligibility_reasons(title, path, rules, locale, untitled_phrases)
    if reasons:
        logger.debug(f"Skipping {title!r} ({path}): excluded by {', '.join(reasons)}")
        return False
    return True


__all__ = [
    "DEFAULT_DATE_FORMAT",
    "ineligibility_reasons",
    "is_date_title",
    "is_eligible",
    "is_ignored_path",
    "is_untitled",
    "matches_ignore_regex",
]
