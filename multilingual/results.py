"""Request and result value types exchanged with translators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from multilingual.errors import ErrorKind


@dataclass(frozen=True)
class TranslationRequest:
    """One title translation, built per invocation and discarded afterwards."""

    source_text: str
    target_languages: Sequence[str]
    source_language: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.source_text:
            raise ValueError("source_text must not be empty")
        object.__setattr__(self, "target_languages", tuple(self.target_languages))


@dataclass(frozen=True)
class TranslationSuccess:
    """Candidates per target language, best candidate first."""

    translations: Dict[str, List[str]] = field(default_factory=dict)
    detected_language: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class TranslationFailure:
    error_kind: ErrorKind
    provider_error_code: Optional[int] = None
    provider_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False


TranslationsResult = Union[TranslationSuccess, TranslationFailure]


__all__ = [
    "TranslationFailure",
    "TranslationRequest",
    "TranslationSuccess",
    "TranslationsResult",
]
