"""Relationship vocabulary: i18n keys mapped to trilingual display names.

The vocabulary is data, not logic. It is loaded from the bundled JSON seed,
from the KuzuDB ``RelationshipType`` table, or from the SQL
``family_relationship_types`` table, and injected into the label resolver.

Keys are camelCase forms of the English name ("Great-Grandfather" ->
"greatGrandfather") and are matched case-insensitively, with or without
the ``relationship.`` prefix.
"""
from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from . import config

logger = logging.getLogger(__name__)

PREFIX = "relationship."
LOCALES = ("en", "ar", "nob")
FALLBACK_LOCALE = "en"


def to_camel_case(name: str) -> str:
    parts = [p for p in re.split(r"[\s\-]+", name.strip()) if p]
    if not parts:
        return ""
    head, tail = parts[0].lower(), parts[1:]
    return head + "".join(p[:1].upper() + p[1:].lower() for p in tail)


def normalize_key(key: str) -> str:
    key = key.strip()
    if key.lower().startswith(PREFIX):
        key = key[len(PREFIX):]
    return key.lower()


def _clean_name(value) -> str:
    text = (value or "").strip()
    # unfilled seed placeholders such as [NOBIIN_CHILD]
    if text.startswith("[") and text.endswith("]"):
        return ""
    return text


@dataclass(frozen=True)
class VocabularyEntry:
    key: str
    names: Dict[str, str] = field(default_factory=dict)
    type_id: Optional[int] = None
    category: Optional[str] = None
    sort_order: int = 0


class RelationshipVocabulary:
    def __init__(self, entries: Iterable[VocabularyEntry]):
        self._entries: Dict[str, VocabularyEntry] = {}
        for entry in entries:
            self._entries[normalize_key(entry.key)] = entry

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key: str):
        return normalize_key(key) in self._entries

    def entries(self) -> List[VocabularyEntry]:
        return sorted(self._entries.values(), key=lambda e: (e.sort_order, e.key))

    def get(self, key: str) -> Optional[VocabularyEntry]:
        return self._entries.get(normalize_key(key))

    def lookup(self, key: str, locale: str) -> Optional[str]:
        """Name for ``key`` in ``locale``, falling back to English."""
        entry = self.get(key)
        if entry is None:
            return None
        return entry.names.get(locale) or entry.names.get(FALLBACK_LOCALE) or None

    def display(self, key: str, locale: str, **params) -> str:
        text = self.lookup(key, locale)
        if text is None:
            logger.debug("No vocabulary entry for %s", key)
            return key if key.startswith(PREFIX) else PREFIX + key
        # only named placeholders are filled; other braces in table rows stay as-is
        for name, value in params.items():
            text = text.replace("{%s}" % name, str(value))
        return text

    def type_id(self, key: str) -> Optional[int]:
        entry = self.get(key)
        return entry.type_id if entry else None

    @property
    def version(self) -> str:
        """Short hash of ids and names; changes whenever the table does."""
        digest = hashlib.sha256()
        for entry in self.entries():
            digest.update(f"{entry.type_id}:{entry.key}:{sorted(entry.names.items())}".encode("utf-8"))
        return digest.hexdigest()[:16]

    # ── Loaders ──

    @classmethod
    def from_rows(cls, rows: Iterable[dict]) -> "RelationshipVocabulary":
        """Build from table-shaped rows (name_english, name_arabic, name_nubian, ...).
        Inactive rows are skipped."""
        entries = []
        for row in rows:
            if row.get("is_active") is False:
                continue
            english = _clean_name(row.get("name_english"))
            key = (row.get("key") or "").strip() or to_camel_case(english)
            if not key:
                continue
            names = {
                "en": english,
                "ar": _clean_name(row.get("name_arabic")),
                "nob": _clean_name(row.get("name_nubian")),
            }
            entries.append(VocabularyEntry(
                key=key,
                names={k: v for k, v in names.items() if v},
                type_id=row.get("id"),
                category=row.get("category") or None,
                sort_order=row.get("sort_order") or 0,
            ))
        return cls(entries)

    @classmethod
    def from_json(cls, path) -> "RelationshipVocabulary":
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(str(p))
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not isinstance(data.get("types"), list):
            raise ValueError("Vocabulary JSON must be an object with a 'types' array")
        return cls.from_rows(data["types"])

    @classmethod
    def from_kuzu(cls, conn) -> "RelationshipVocabulary":
        result = conn.execute(
            "MATCH (t:RelationshipType) "
            "RETURN t.id, t.rkey, t.name_english, t.name_arabic, t.name_nubian, "
            "t.category, t.sort_order, t.is_active ORDER BY t.sort_order"
        )
        rows = []
        while result.has_next():
            row = result.get_next()
            rows.append({"id": row[0], "key": row[1], "name_english": row[2],
                         "name_arabic": row[3], "name_nubian": row[4],
                         "category": row[5], "sort_order": row[6], "is_active": row[7]})
        return cls.from_rows(rows)

    @classmethod
    def from_sql(cls, session) -> "RelationshipVocabulary":
        from .models import FamilyRelationshipType

        types = (session.query(FamilyRelationshipType)
                 .filter(FamilyRelationshipType.is_active.is_(True))
                 .order_by(FamilyRelationshipType.sort_order)
                 .all())
        return cls.from_rows({
            "id": t.id, "key": t.key, "name_english": t.name_english,
            "name_arabic": t.name_arabic, "name_nubian": t.name_nubian,
            "category": t.category, "sort_order": t.sort_order,
        } for t in types)

    @classmethod
    def default(cls) -> "RelationshipVocabulary":
        return _load_default(str(config.VOCABULARY_PATH))


@lru_cache(maxsize=4)
def _load_default(path: str) -> RelationshipVocabulary:
    vocabulary = RelationshipVocabulary.from_json(path)
    logger.info("Loaded %d relationship types from %s", len(vocabulary), path)
    return vocabulary
