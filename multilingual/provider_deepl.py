"""DeepL (v2) client implementation."""

from __future__ import annotations

from typing import Any, List, Optional

import httpx

from multilingual.errors import ErrorKind
from multilingual.provider_base import HttpTranslator, ParsedTranslations

DEEPL_FREE_API_URL = "https://api-free.deepl.com/v2/translate"
DEEPL_PRO_API_URL = "https://api.deepl.com/v2/translate"

UNSUPPORTED_TARGET_MESSAGE = "Value for 'target_lang' not supported."
QUOTA_EXCEEDED_STATUS = 456


def deepl_api_url(api_key: str) -> str:
    """Free-plan keys end in ``:fx`` and must use the free endpoint."""
    return DEEPL_FREE_API_URL if api_key.endswith(":fx") else DEEPL_PRO_API_URL


class DeepLTranslator(HttpTranslator):
    """DeepL; the API key travels in the ``Authorization`` header."""

    name = "DeepL"

    async def _send(
        self,
        client: httpx.AsyncClient,
        text: str,
        target_language: str,
        source_language: Optional[str],
    ) -> httpx.Response:
        data = {"text": text, "target_lang": target_language}
        if source_language:
            data["source_lang"] = source_language
        return await client.post(
            deepl_api_url(self._api_key),
            data=data,
            headers={"Authorization": f"DeepL-Auth-Key {self._api_key}"},
            timeout=self._timeout,
        )

    def _parse(self, payload: Any) -> Optional[ParsedTranslations]:
        translations = payload.get("translations") if isinstance(payload, dict) else None
        if not isinstance(translations, list) or not translations:
            return None
        texts: List[str] = [
            item["text"]
            for item in translations
            if isinstance(item, dict) and isinstance(item.get("text"), str)
        ]
        first = translations[0] if isinstance(translations[0], dict) else {}
        return ParsedTranslations(texts, first.get("detected_source_language"))

    def _error_message(self, payload: Any) -> Optional[str]:
        # DeepL sometimes answers with only a status code and an empty body
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            return payload["message"]
        return None

    def _classify_specific(
        self, status: int, message: Optional[str], payload: Any
    ) -> Optional[ErrorKind]:
        if status == QUOTA_EXCEEDED_STATUS:
            return ErrorKind.FREE_LIMITS_REACHED
        if status == 400 and message and UNSUPPORTED_TARGET_MESSAGE in message:
            return ErrorKind.INVALID_LANGUAGES
        return None


__all__ = ["DEEPL_FREE_API_URL", "DEEPL_PRO_API_URL", "DeepLTranslator", "deepl_api_url"]
