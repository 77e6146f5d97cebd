"""Google Cloud Translation (v2, basic) client implementation."""

from __future__ import annotations

from typing import Any, List, Optional

import httpx

from multilingual.errors import ErrorKind
from multilingual.provider_base import HttpTranslator, ParsedTranslations

GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


class GoogleTranslator(HttpTranslator):
    """Google Translate; the API key travels as the ``key`` query parameter."""

    name = "Google Translate"

    async def _send(
        self,
        client: httpx.AsyncClient,
        text: str,
        target_language: str,
        source_language: Optional[str],
    ) -> httpx.Response:
        params = {"key": self._api_key, "q": text, "target": target_language}
        if source_language:
            params["source"] = source_language
        return await client.post(GOOGLE_TRANSLATE_URL, params=params, timeout=self._timeout)

    def _parse(self, payload: Any) -> Optional[ParsedTranslations]:
        if not isinstance(payload, dict):
            return None
        data = payload.get("data")
        translations = data.get("translations") if isinstance(data, dict) else None
        if not isinstance(translations, list) or not translations:
            return None
        texts: List[str] = [
            item["translatedText"]
            for item in translations
            if isinstance(item, dict) and isinstance(item.get("translatedText"), str)
        ]
        first = translations[0] if isinstance(translations[0], dict) else {}
        return ParsedTranslations(texts, first.get("detectedSourceLanguage"))

    def _error_message(self, payload: Any) -> Optional[str]:
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        return None

    def _classify_specific(
        self, status: int, message: Optional[str], payload: Any
    ) -> Optional[ErrorKind]:
        if status != 400 or not message:
            return None
        if "API key not valid" in message:
            return ErrorKind.AUTH_BAD_KEY
        if "Invalid Value" in message and "target" in _violated_fields(payload):
            return ErrorKind.INVALID_LANGUAGES
        return None


def _violated_fields(payload: Any) -> List[str]:
    """Collect ``fieldViolations[].field`` from a Google error payload."""
    fields: List[str] = []
    error = payload.get("error") if isinstance(payload, dict) else None
    details = error.get("details") if isinstance(error, dict) else None
    for detail in details if isinstance(details, list) else []:
        violations = detail.get("fieldViolations") if isinstance(detail, dict) else None
        for violation in violations if isinstance(violations, list) else []:
            if isinstance(violation, dict) and isinstance(violation.get("field"), str):
                fields.append(violation["field"])
    return fields


__all__ = ["GOOGLE_TRANSLATE_URL", "GoogleTranslator"]
