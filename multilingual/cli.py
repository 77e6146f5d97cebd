#!/usr/bin/env python3
"""CLI entry point: translate a note title into its aliases."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import List, Optional

from multilingual.aliases import FrontMatterAliasStore
from multilingual.config import (
    AppSettings,
    mask_api_key,
    normalize_translator_name,
    parse_language_list,
)
from multilingual.notices import NOT_A_FILE, ConsoleNotifier, format_notice
from multilingual.orchestrator import (
    OrchestratorState,
    TitleTranslationOrchestrator,
    TranslationOutcome,
)

logger = logging.getLogger(__name__)

EVENTS = ("manual", "create", "rename")
NOTE_SUFFIX = ".md"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Translate a note title and add the translations to its aliases",
    )
    parser.add_argument(
        "note",
        nargs="?",
        help="Path to the Markdown note (not needed with --show-config)",
    )
    parser.add_argument(
        "--event",
        choices=EVENTS,
        default="manual",
        help="What triggered the translation; create/rename honour auto-translate and ignore rules",
    )
    parser.add_argument("--previous-path", help="Former note path (for --event rename)")
    parser.add_argument(
        "--vault",
        default=".",
        help="Vault root; ignore-path rules match the note path relative to it",
    )
    parser.add_argument("--settings", help="Path to the YAML settings file")
    parser.add_argument("--translator", help="Translation service: google or deepl")
    parser.add_argument("--languages", help='Comma-separated target languages (e.g.: "fr, de")')
    parser.add_argument(
        "--include-title",
        action="store_true",
        help="Also add the original title to the aliases",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bar output")
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the effective settings (API keys masked) and exit",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def apply_overrides(args: argparse.Namespace, settings: AppSettings) -> AppSettings:
    provider = dataclasses.replace(settings.provider, show_progress=not args.no_progress)
    if args.translator:
        provider = dataclasses.replace(
            provider, translator=normalize_translator_name(args.translator)
        )
    aliases = settings.aliases
    if args.languages is not None:
        aliases = dataclasses.replace(
            aliases, target_languages=parse_language_list(args.languages)
        )
    if args.include_title:
        aliases = dataclasses.replace(aliases, include_original_title=True)
    return AppSettings(provider=provider, aliases=aliases)


def describe_settings(settings: AppSettings) -> List[str]:
    provider, aliases = settings.provider, settings.aliases
    rules = aliases.rules
    return [
        f"translator: {provider.display_name}",
        f"api key: {mask_api_key(provider.api_key)}",
        f"target languages: {', '.join(aliases.target_languages) or '(none)'}",
        f"auto translate: {aliases.auto_translate}",
        f"include original title: {aliases.include_original_title}",
        f"locale: {aliases.locale}",
        f"ignore path: {rules.ignore_path_prefix or '-'}",
        f"ignore date format: {rules.ignore_date_format or '-'}",
        f"ignore regex: {rules.ignore_regex or '-'}",
    ]


async def run_event(
    orchestrator: TitleTranslationOrchestrator,
    event: str,
    name: str,
    path: str,
    previous_path: Optional[str] = None,
) -> Optional[TranslationOutcome]:
    if event == "create":
        return await orchestrator.on_create(name, path)
    if event == "rename":
        return await orchestrator.on_rename(name, path, previous_path or path)
    return await orchestrator.translate_title(name, path)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.note is None and not args.show_config:
        parser.error("the note argument is required unless --show-config is given")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    try:
        settings = apply_overrides(
            args, AppSettings.load(Path(args.settings) if args.settings else None)
        )
    except (ValueError, RuntimeError) as exc:
        print(f"[error] {exc}")
        return 2

    if args.show_config:
        for line in describe_settings(settings):
            print(line)
        return 0

    vault = Path(args.vault).resolve()
    note = Path(args.note).resolve()
    notifier = ConsoleNotifier()
    if note.suffix != NOTE_SUFFIX or not note.is_file():
        notifier.notify(format_notice(NOT_A_FILE), logging.ERROR)
        return 1
    try:
        relative = note.relative_to(vault).as_posix()
    except ValueError:
        print(f"[error] {note} is outside the vault {vault}")
        return 2

    orchestrator = TitleTranslationOrchestrator(settings, FrontMatterAliasStore(vault), notifier)
    outcome = asyncio.run(
        run_event(orchestrator, args.event, note.stem, relative, args.previous_path)
    )
    if outcome is None:
        logger.info(f"Skipped {relative}: automatic translation does not apply")
        return 0
    return 2 if outcome.state is OrchestratorState.FAILED else 0


if __name__ == "__main__":
    raise SystemExit(main())
