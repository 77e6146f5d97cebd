"""Title translation orchestrator."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from multilingual.aliases import AliasUpdater
from multilingual.config import AppSettings, load_untitled_phrases
from multilingual.eligibility import is_eligible
from multilingual.errors import ErrorKind
from multilingual.interfaces import AliasStore, Notifier, Translator
from multilingual.network import ConnectivityCheck, is_online
from multilingual.notices import ALIASES_ADDED, NO_NEW_ALIASES, format_notice
from multilingual.providers import create_translator
from multilingual.results import TranslationFailure, TranslationRequest, TranslationSuccess

logger = logging.getLogger(__name__)


class OrchestratorState(str, Enum):
    IDLE = "IDLE"
    PRECHECKING = "PRECHECKING"
    CALLING_PROVIDER = "CALLING_PROVIDER"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass(frozen=True)
class TranslationOutcome:
    """Terminal state of one title translation."""

    state: OrchestratorState
    added_aliases: Tuple[str, ...] = ()
    error_kind: Optional[ErrorKind] = None

    @property
    def changed(self) -> bool:
        return bool(self.added_aliases)


def select_candidates(result: TranslationSuccess) -> List[str]:
    """First-ranked translation per language, skipping the detected source language."""
    detected = (result.detected_language or "").lower()
    candidates: List[str] = []
    for language, variants in result.translations.items():
        if detected and language.lower() == detected:
            continue
        if variants:
            candidates.append(variants[0])
    return candidates


class TitleTranslationOrchestrator:
    """Translates note titles and records the translations as aliases.

    Lifecycle events (note created or renamed) only translate when automatic
    translation is enabled and the title passes the eligibility rules; a
    manual request always translates. Every translation that starts ends with
    exactly one notice, and failures never touch the stored aliases.
    """

    def __init__(
        self,
        settings: AppSettings,
        store: AliasStore,
        notifier: Notifier,
        *,
        translator: Optional[Translator] = None,
        connectivity_check: ConnectivityCheck = is_online,
        untitled_phrases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._settings = settings
        self._updater = AliasUpdater(store)
        self._notifier = notifier
        self._connectivity_check = connectivity_check
        self._untitled_phrases = (
            untitled_phrases if untitled_phrases is not None else load_untitled_phrases()
        )
        self._translator = translator or create_translator(
            settings.provider, connectivity_check=connectivity_check
        )
        self.state = OrchestratorState.IDLE

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def translator(self) -> Translator:
        return self._translator

    def rebuild_translator(
        self, settings: AppSettings, translator: Optional[Translator] = None
    ) -> None:
        """Apply new settings and construct the matching translator."""
        self._settings = settings
        self._translator = translator or create_translator(
            settings.provider, connectivity_check=self._connectivity_check
        )
        logger.info(f"Translator switched to {self._translator.name}")

    async def on_create(self, name: str, path: str) -> Optional[TranslationOutcome]:
        return await self._auto_translate(name, path)

    async def on_rename(
        self, name: str, path: str, previous_path: str
    ) -> Optional[TranslationOutcome]:
        logger.debug(f"Note renamed: {previous_path} -> {path}")
        return await self._auto_translate(name, path)

    async def _auto_translate(self, name: str, path: str) -> Optional[TranslationOutcome]:
        aliases = self._settings.aliases
        if not aliases.auto_translate:
            return None
        if not is_eligible(name, path, aliases.rules, aliases.locale, self._untitled_phrases):
            return None
        return await self.translate_title(name, path)

    async def translate_title(self, name: str, path: str) -> TranslationOutcome:
        """Translate ``name`` and add the results to the aliases of ``path``."""
        aliases = self._settings.aliases
        self._transition(OrchestratorState.PRECHECKING, name)
        try:
            error = await self._precheck()
        except Exception:
            logger.exception(f"Precheck failed while translating {name!r}")
            error = ErrorKind.OTHER_ERROR
        if error is not None:
            return self._fail(error, name)

        self._transition(OrchestratorState.CALLING_PROVIDER, name)
        try:
            request = TranslationRequest(name, aliases.target_languages, aliases.source_language)
            result = await self._translator.translate(
                request.source_text, request.target_languages, request.source_language
            )
            if isinstance(result, TranslationFailure):
                logger.debug(
                    f"{self._translator.name} failure: code={result.provider_error_code} "
                    f"message={result.provider_message!r}"
                )
                return self._fail(result.error_kind, name)
            added = await self._updater.add_aliases(
                path, select_candidates(result), name, aliases.include_original_title
            )
        except Exception:
            logger.exception(f"Unexpected error while translating {name!r}")
            return self._fail(ErrorKind.OTHER_ERROR, name)

        self._transition(OrchestratorState.SUCCESS, name)
        if added:
            logger.info(f"Added {len(added)} aliases to {path}")
            self._notifier.notify(format_notice(ALIASES_ADDED, aliases=added), logging.INFO)
        else:
            self._notifier.notify(format_notice(NO_NEW_ALIASES), logging.INFO)
        self.state = OrchestratorState.IDLE
        return TranslationOutcome(OrchestratorState.SUCCESS, tuple(added))

    async def _precheck(self) -> Optional[ErrorKind]:
        if not await asyncio.to_thread(self._connectivity_check):
            return ErrorKind.OFFLINE
        if not self._settings.provider.api_key:
            return ErrorKind.AUTH_NO_KEY
        if not self._settings.aliases.target_languages:
            return ErrorKind.NO_LANGUAGES
        return None

    def _fail(self, error: ErrorKind, name: str) -> TranslationOutcome:
        self._transition(OrchestratorState.FAILED, name)
        logger.warning(f"Title translation failed: {error.value}")
        self._notifier.notify(
            format_notice(
                error.value,
                translator=self._translator.name,
                languages=self._settings.aliases.target_languages,
            ),
            logging.ERROR,
        )
        self.state = OrchestratorState.IDLE
        return TranslationOutcome(OrchestratorState.FAILED, error_kind=error)

    def _transition(self, state: OrchestratorState, name: str) -> None:
        logger.debug(f"{name!r}: {self.state.value} -> {state.value}")
        self.state = state


__all__ = [
    "OrchestratorState",
    "TitleTranslationOrchestrator",
    "TranslationOutcome",
    "select_candidates",
]
