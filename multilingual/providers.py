"""Translator lookup and construction from settings."""

from __future__ import annotations

from typing import Dict, Optional, Type

import httpx

from multilingual.config import TRANSLATOR_DEEPL, TRANSLATOR_GOOGLE, ProviderSettings
from multilingual.network import ConnectivityCheck, is_online
from multilingual.provider_base import HttpTranslator
from multilingual.provider_deepl import DeepLTranslator
from multilingual.provider_google import GoogleTranslator

TRANSLATORS: Dict[str, Type[HttpTranslator]] = {
    TRANSLATOR_GOOGLE: GoogleTranslator,
    TRANSLATOR_DEEPL: DeepLTranslator,
}


def create_translator(
    settings: ProviderSettings,
    *,
    client: Optional[httpx.AsyncClient] = None,
    connectivity_check: ConnectivityCheck = is_online,
) -> HttpTranslator:
    """Instantiate the active translator; call again whenever settings change."""
    try:
        translator_cls = TRANSLATORS[settings.translator]
    except KeyError as exc:
        raise ValueError(f"No translator registered for {settings.translator!r}") from exc
    return translator_cls(
        settings.api_key,
        timeout_seconds=settings.timeout_seconds,
        show_progress=settings.show_progress,
        client=client,
        connectivity_check=connectivity_check,
    )


__all__ = ["TRANSLATORS", "create_translator"]
