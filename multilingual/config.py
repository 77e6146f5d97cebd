"""Configuration helpers for title translation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

try:
    from dotenv import load_dotenv
except ImportError as exc:  # pragma: no cover - import guard
    raise RuntimeError(
        "python-dotenv is required. Install dependencies via 'pip install -e .'."
    ) from exc

TRANSLATOR_GOOGLE = "google"
TRANSLATOR_DEEPL = "deepl"
TRANSLATOR_DISPLAY_NAMES = {
    TRANSLATOR_GOOGLE: "Google Translate",
    TRANSLATOR_DEEPL: "DeepL",
}
API_KEY_ENV_VARS = {
    TRANSLATOR_GOOGLE: "GOOGLE_TRANSLATE_API_KEY",
    TRANSLATOR_DEEPL: "DEEPL_API_KEY",
}

DEFAULT_TRANSLATOR = TRANSLATOR_GOOGLE
DEFAULT_TARGET_LANGUAGES: Tuple[str, ...] = ("fr", "de")
DEFAULT_LOCALE = "en"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_SETTINGS_PATH = Path("config/settings.yml")
DEFAULT_UNTITLED_PATH = Path("config/untitled.yml")

# Name the host gives to new, not yet renamed notes
DEFAULT_UNTITLED_PHRASES = {
    "en": "Untitled",
    "fr": "Sans titre",
    "de": "Unbenannt",
    "es": "Sin título",
    "it": "Senza titolo",
    "pt": "Sem título",
    "nl": "Naamloos",
    "ru": "Без названия",
    "uk": "Без назви",
    "pl": "Bez tytułu",
    "ja": "無題のファイル",
    "zh": "未命名",
    "ko": "제목 없음",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


load_dotenv()


def normalize_translator_name(value: str) -> str:
    """Map a translator id or its user-facing name to the translator id."""
    wanted = value.strip().lower()
    for translator_id, display_name in TRANSLATOR_DISPLAY_NAMES.items():
        if wanted in (translator_id, display_name.lower()):
            return translator_id
    known = ", ".join(sorted(TRANSLATOR_DISPLAY_NAMES))
    raise ValueError(f"Unknown translator {value!r}; expected one of: {known}")


def parse_language_list(value: Any) -> Tuple[str, ...]:
    """Parse ``"fr, de"`` or ``["fr", "de"]`` into a tuple of language codes."""
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else list(value)
    return tuple(code for code in (str(item).strip() for item in items) if code)


def mask_api_key(api_key: str) -> str:
    if not api_key:
        return "(not set)"
    return "*** *** *** " + api_key[-4:]


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a float, got: {raw}") from exc


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable {name} must be a boolean, got: {raw}")


def _get_optional_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw or None


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE_VALUES | _FALSE_VALUES:
        return value.strip().lower() in _TRUE_VALUES
    raise ValueError(f"Setting {name} must be a boolean, got: {value!r}")


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Setting {name} must be a mapping, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class EligibilityRules:
    """Which titles automatic translation leaves alone."""

    ignore_path_prefix: Optional[str] = None
    ignore_date_format: Optional[str] = None
    ignore_regex: Optional[str] = None
    # Overrides the per-locale phrase from DEFAULT_UNTITLED_PHRASES
    untitled_phrase: Optional[str] = None


@dataclass(frozen=True)
class ProviderSettings:
    """Settings container for the translation services."""

    translator: str = DEFAULT_TRANSLATOR
    api_keys: Mapping[str, str] = field(default_factory=dict)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    show_progress: bool = False

    @property
    def api_key(self) -> str:
        """Credential of the active translator ("" when not configured)."""
        return self.api_keys.get(self.translator, "")

    @property
    def display_name(self) -> str:
        return TRANSLATOR_DISPLAY_NAMES.get(self.translator, self.translator)

    @classmethod
    def from_sources(cls, data: Mapping[str, Any]) -> "ProviderSettings":
        translator = normalize_translator_name(
            os.getenv("MULTILINGUAL_TRANSLATOR") or data.get("translator") or DEFAULT_TRANSLATOR
        )
        file_keys = _section(data, "api_keys")
        api_keys: Dict[str, str] = {}
        for translator_id, env_name in API_KEY_ENV_VARS.items():
            file_key = file_keys.get(translator_id) or file_keys.get(
                TRANSLATOR_DISPLAY_NAMES[translator_id]
            )
            api_keys[translator_id] = os.getenv(env_name) or str(file_key or "")
        timeout_seconds = _get_float(
            "MULTILINGUAL_TIMEOUT_SECONDS",
            float(data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        )
        return cls(
            translator=translator,
            api_keys=api_keys,
            timeout_seconds=timeout_seconds,
            show_progress=_as_bool(data.get("show_progress", False), "show_progress"),
        )


@dataclass(frozen=True)
class AliasSettings:
    """Runtime knobs for alias generation."""

    target_languages: Tuple[str, ...] = DEFAULT_TARGET_LANGUAGES
    source_language: Optional[str] = None
    auto_translate: bool = False
    include_original_title: bool = False
    locale: str = DEFAULT_LOCALE
    rules: EligibilityRules = field(default_factory=EligibilityRules)

    @classmethod
    def from_sources(cls, data: Mapping[str, Any]) -> "AliasSettings":
        raw_languages = os.getenv("MULTILINGUAL_TARGET_LANGUAGES")
        if raw_languages is None:
            raw_languages = data.get("target_languages", DEFAULT_TARGET_LANGUAGES)
        ignore = _section(data, "ignore")
        rules = EligibilityRules(
            ignore_path_prefix=_get_optional_str("MULTILINGUAL_IGNORE_PATH", ignore.get("path")),
            ignore_date_format=_get_optional_str(
                "MULTILINGUAL_IGNORE_DATE_FORMAT", ignore.get("date_format")
            ),
            ignore_regex=_get_optional_str("MULTILINGUAL_IGNORE_REGEX", ignore.get("regex")),
            untitled_phrase=ignore.get("untitled"),
        )
        return cls(
            target_languages=parse_language_list(raw_languages),
            source_language=_get_optional_str(
                "MULTILINGUAL_SOURCE_LANGUAGE", data.get("source_language")
            ),
            auto_translate=_get_bool(
                "MULTILINGUAL_AUTO_TRANSLATE",
                _as_bool(data.get("auto_translate", False), "auto_translate"),
            ),
            include_original_title=_get_bool(
                "MULTILINGUAL_INCLUDE_TITLE",
                _as_bool(data.get("include_original_title", False), "include_original_title"),
            ),
            locale=os.getenv("MULTILINGUAL_LOCALE") or data.get("locale") or DEFAULT_LOCALE,
            rules=rules,
        )


@dataclass(frozen=True)
class AppSettings:
    """Aggregates configuration needed by the orchestrator and the CLI."""

    provider: ProviderSettings
    aliases: AliasSettings

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppSettings":
        """Read the YAML settings file (if any), then apply env overrides."""
        data = load_settings_file(path or DEFAULT_SETTINGS_PATH)
        return cls(ProviderSettings.from_sources(data), AliasSettings.from_sources(data))


def load_settings_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the root")
    return data


def load_untitled_phrases(path: Path = DEFAULT_UNTITLED_PATH) -> Dict[str, str]:
    """Load the locale to "Untitled" phrase mapping from config/untitled.yml."""
    phrases = dict(DEFAULT_UNTITLED_PHRASES)
    if not path.exists():
        return phrases
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not isinstance(data.get("untitled"), dict):
            raise ValueError("untitled.yml must contain an 'untitled' mapping")
        phrases.update({str(k).lower(): str(v) for k, v in data["untitled"].items()})
        return phrases
    except Exception as e:
        raise RuntimeError(f"Failed to load untitled phrases: {e}") from e


def untitled_phrase_for(locale: str, phrases: Mapping[str, str]) -> str:
    """Resolve ``fr-CA`` to ``fr-ca``, then ``fr``, then English."""
    normalized = locale.strip().lower().replace("_", "-")
    candidates: List[str] = [normalized, normalized.split("-")[0], DEFAULT_LOCALE]
    for candidate in candidates:
        if candidate in phrases:
            return phrases[candidate]
    return DEFAULT_UNTITLED_PHRASES[DEFAULT_LOCALE]


__all__ = [
    "AliasSettings",
    "AppSettings",
    "EligibilityRules",
    "ProviderSettings",
    "TRANSLATOR_DISPLAY_NAMES",
    "load_untitled_phrases",
    "mask_api_key",
    "normalize_translator_name",
    "parse_language_list",
    "untitled_phrase_for",
]
