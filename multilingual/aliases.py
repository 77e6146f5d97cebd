"""Alias merging and persistence in Markdown front matter."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import yaml

from multilingual.interfaces import AliasStore

logger = logging.getLogger(__name__)

ALIASES_KEY = "aliases"
FRONT_MATTER_DELIMITER = "---"


def merge_aliases(
    existing: Sequence[str],
    candidates: Iterable[str],
    original_title: str,
    include_original: bool,
) -> List[str]:
    """Append new candidates to ``existing`` without duplicates.

    With ``include_original`` the title itself becomes a candidate, otherwise
    it is removed from the candidates (a service may echo the source text
    unchanged for some language). ``existing`` is kept verbatim, so the result
    is never shorter than it and is longer only if something new was added.
    """
    pool = list(candidates)
    if include_original:
        pool.append(original_title)
    else:
        pool = [alias for alias in pool if alias != original_title]

    merged = list(existing)
    seen = set(merged)
    for alias in pool:
        if alias not in seen:
            seen.add(alias)
            merged.append(alias)
    return merged


def normalize_aliases(value: Any) -> List[str]:
    """Front matter may hold a list, a single string, or nothing at all."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    raise TypeError(f"aliases must be a list or a string, got {type(value).__name__}")


class AliasUpdater:
    """Serializes read-merge-write of each entity's aliases.

    Two overlapping translations of the same note (rapid renames) would
    otherwise both read the old list and the second write would drop the
    first one's additions.
    """

    def __init__(self, store: AliasStore) -> None:
        self._store = store
        self._locks: Dict[str, asyncio.Lock] = {}
        # Callers holding or awaiting each lock; the lock is dropped at zero
        self._users: Dict[str, int] = {}

    @property
    def locked_entities(self) -> List[str]:
        return list(self._locks)

    async def add_aliases(
        self,
        entity_id: str,
        candidates: Sequence[str],
        original_title: str,
        include_original: bool,
    ) -> List[str]:
        """Merge ``candidates`` into the stored aliases; return those added."""
        lock = self._locks.setdefault(entity_id, asyncio.Lock())
        self._users[entity_id] = self._users.get(entity_id, 0) + 1
        try:
            async with lock:
                return await self._merge(entity_id, candidates, original_title, include_original)
        finally:
            self._users[entity_id] -= 1
            if not self._users[entity_id]:
                del self._users[entity_id]
                del self._locks[entity_id]

    async def _merge(
        self,
        entity_id: str,
        candidates: Sequence[str],
        original_title: str,
        include_original: bool,
    ) -> List[str]:
        existing = await self._store.read_aliases(entity_id)
        merged = merge_aliases(existing, candidates, original_title, include_original)
        if len(merged) == len(existing):
            logger.debug(f"No new aliases for {entity_id}")
            return []
        await self._store.write_aliases(entity_id, merged)
        added = merged[len(existing) :]
        logger.debug(f"Stored {len(added)} new aliases for {entity_id}")
        return added


def split_front_matter(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """Return (front matter mapping or None, body) of a Markdown document.

    Raises ValueError when the front matter is not a mapping or is never closed.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != FRONT_MATTER_DELIMITER:
        return None, text
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == FRONT_MATTER_DELIMITER:
            data = yaml.safe_load("".join(lines[1:index])) or {}
            if not isinstance(data, dict):
                raise ValueError("Front matter must be a mapping")
            return data, "".join(lines[index + 1 :])
    raise ValueError("Front matter is opened with --- but never closed")


def render_front_matter(data: Dict[str, Any], body: str) -> str:
    dumped = yaml.safe_dump(data, allow_unicode=True, sort_keys=False, default_flow_style=False)
    return f"{FRONT_MATTER_DELIMITER}\n{dumped}{FRONT_MATTER_DELIMITER}\n{body}"


class FrontMatterAliasStore:
    """Aliases kept in the ``aliases`` key of a note's YAML front matter.

    Entity ids are note paths, resolved against ``root``.
    """

    def __init__(self, root: Path = Path(".")) -> None:
        self._root = root

    def _path(self, entity_id: str) -> Path:
        return self._root / entity_id

    async def read_aliases(self, entity_id: str) -> List[str]:
        text = self._path(entity_id).read_text(encoding="utf-8")
        data, _ = split_front_matter(text)
        return normalize_aliases((data or {}).get(ALIASES_KEY))

    async def write_aliases(self, entity_id: str, aliases: List[str]) -> None:
        path = self._path(entity_id)
        data, body = split_front_matter(path.read_text(encoding="utf-8"))
        data = dict(data or {})
        data[ALIASES_KEY] = list(aliases)
        path.write_text(render_front_matter(data, body), encoding="utf-8")


__all__ = [
    "AliasUpdater",
    "FrontMatterAliasStore",
    "merge_aliases",
    "normalize_aliases",
    "render_front_matter",
    "split_front_matter",
]
