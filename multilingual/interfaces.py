"""Core interfaces for dependency inversion."""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from multilingual.results import TranslationsResult


class Translator(Protocol):
    """Protocol for the external translation services.

    Every service (Google Translate, DeepL, ...) normalizes its HTTP API into
    the same result contract, so the orchestrator can swap between them
    without knowing which one is active.
    """

    @property
    def name(self) -> str:
        """Return the user-facing service name (e.g., 'Google Translate')."""
        ...

    async def translate(
        self,
        text: str,
        target_languages: Sequence[str],
        source_language: Optional[str] = None,
    ) -> TranslationsResult:
        """Translate ``text`` into every target language.

        Args:
            text: Non-empty source text
            target_languages: Language codes, processed in the given order
            source_language: Optional hint; the service detects it otherwise

        Returns:
            A success carrying the candidates per language, or a failure
            classified into an ErrorKind. Transport errors are never raised.
        """
        ...


class AliasStore(Protocol):
    """Persistent alias list of an entity (a note), owned by the host."""

    async def read_aliases(self, entity_id: str) -> List[str]:
        ...

    async def write_aliases(self, entity_id: str, aliases: List[str]) -> None:
        ...


class Notifier(Protocol):
    """User-facing notification channel."""

    def notify(self, message: str, level: int) -> None:
        """Show ``message``; ``level`` is a :mod:`logging` level."""
        ...


__all__ = ["AliasStore", "Notifier", "Translator"]
