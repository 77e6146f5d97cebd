"""Shared request loop for HTTP translation services."""

from __future__ import annotations

import asyncio
import html
import logging
import re
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

import httpx
from tqdm import tqdm

from multilingual.errors import ErrorKind
from multilingual.network import ConnectivityCheck, is_online
from multilingual.results import TranslationFailure, TranslationSuccess, TranslationsResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

INVALID_KEY_RE = re.compile(
    r"(api|auth(entication)?)[ _-]?key[^.]*\b(not valid|invalid)\b"
    r"|\binvalid\b[^.]*(api|auth(entication)?)[ _-]?key",
    re.IGNORECASE,
)


class ParsedTranslations(NamedTuple):
    texts: List[str]
    detected_language: Optional[str]


def read_json(response: httpx.Response) -> Any:
    """Decode a JSON body, returning None for empty or unparsable payloads."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class HttpTranslator:
    """Base class issuing one POST per target language, sequentially.

    Subclasses describe the service: how a request is built, where the
    translations sit in the response envelope, and how error payloads map to
    an :class:`ErrorKind`. The loop itself is shared:

    * target languages are translated strictly in the order given;
    * the detected source language of the first response wins;
    * translated strings are HTML-unescaped before being stored;
    * the first failing language aborts the call, and the translations already
      collected for earlier languages are discarded.
    """

    name = "HTTP"

    def __init__(
        self,
        api_key: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        show_progress: bool = False,
        client: Optional[httpx.AsyncClient] = None,
        connectivity_check: ConnectivityCheck = is_online,
    ) -> None:
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout_seconds)
        self._show_progress = show_progress
        self._client = client
        self._connectivity_check = connectivity_check

    async def translate(
        self,
        text: str,
        target_languages: Sequence[str],
        source_language: Optional[str] = None,
    ) -> TranslationsResult:
        if self._client is not None:
            return await self._translate_all(self._client, text, target_languages, source_language)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._translate_all(client, text, target_languages, source_language)

    async def _translate_all(
        self,
        client: httpx.AsyncClient,
        text: str,
        target_languages: Sequence[str],
        source_language: Optional[str],
    ) -> TranslationsResult:
        languages = list(target_languages)
        translations: Dict[str, List[str]] = {}
        detected: Optional[str] = None

        progress = tqdm(
            total=len(languages),
            desc=f"Translating ({self.name})",
            unit="lang",
            disable=not self._show_progress,
        )
        try:
            for target in languages:
                logger.debug(f"{self.name}: translating {text!r} into {target}")
                try:
                    response = await self._send(client, text, target, source_language)
                except httpx.TransportError as exc:
                    return await self._classify_transport_error(exc)

                if response.status_code != 200:
                    failure = self._classify_response(response)
                    logger.warning(
                        f"{self.name} rejected target {target!r} "
                        f"({response.status_code}): {failure.error_kind.value}"
                    )
                    return failure

                payload = read_json(response)
                parsed = self._parse(payload) if payload is not None else None
                if parsed is None or not parsed.texts:
                    logger.warning(f"{self.name} response for {target!r} has no translations")
                    return TranslationFailure(
                        ErrorKind.OTHER_ERROR,
                        response.status_code,
                        "Response did not contain translations",
                    )

                if detected is None and parsed.detected_language:
                    detected = parsed.detected_language.lower()
                translations[target] = [html.unescape(variant) for variant in parsed.texts]
                progress.update(1)
        finally:
            progress.close()

        if detected is None and source_language:
            detected = source_language.lower()
        return TranslationSuccess(translations=translations, detected_language=detected)

    async def _classify_transport_error(self, exc: httpx.TransportError) -> TranslationFailure:
        online = await asyncio.to_thread(self._connectivity_check)
        kind = ErrorKind.OTHER_ERROR if online else ErrorKind.OFFLINE
        logger.warning(f"{self.name} request failed ({type(exc).__name__}): {kind.value}")
        return TranslationFailure(kind, None, str(exc) or type(exc).__name__)

    def _classify_response(self, response: httpx.Response) -> TranslationFailure:
        payload = read_json(response)
        message = self._error_message(payload)
        kind = self._classify_error(response.status_code, message, payload)
        return TranslationFailure(kind, response.status_code, message)

    def _classify_error(self, status: int, message: Optional[str], payload: Any) -> ErrorKind:
        specific = self._classify_specific(status, message, payload)
        if specific is not None:
            return specific
        if status in (401, 403):
            if message and INVALID_KEY_RE.search(message):
                return ErrorKind.AUTH_BAD_KEY
            return ErrorKind.AUTH_PROBLEM
        if status == 429:
            return ErrorKind.FREE_LIMITS_REACHED
        if 500 <= status < 600:
            return ErrorKind.SERVICE_UNAVAILABLE
        return ErrorKind.OTHER_ERROR

    # Service-specific hooks

    async def _send(
        self,
        client: httpx.AsyncClient,
        text: str,
        target_language: str,
        source_language: Optional[str],
    ) -> httpx.Response:
        raise NotImplementedError

    def _parse(self, payload: Any) -> Optional[ParsedTranslations]:
        raise NotImplementedError

    def _error_message(self, payload: Any) -> Optional[str]:
        return None

    def _classify_specific(
        self, status: int, message: Optional[str], payload: Any
    ) -> Optional[ErrorKind]:
        return None


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "HttpTranslator", "ParsedTranslations", "read_json"]
