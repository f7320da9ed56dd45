from __future__ import annotations

import json
import re
from collections import defaultdict
from pathlib import Path

from .provider import TaxonomyProvider


class LocalTaxonomy(TaxonomyProvider):
    def __init__(
        self,
        synonyms_path: str | Path | None = None,
        families_path: str | Path | None = None,
    ) -> None:
        path = Path(synonyms_path) if synonyms_path else Path(__file__).with_name("synonyms.json")
        family_path = Path(families_path) if families_path else Path(__file__).with_name("families.json")
        self._synonyms = self._load_synonyms(path)
        self._aliases: dict[str, set[str]] = defaultdict(set)
        for alias, canonical in self._synonyms.items():
            self._aliases[canonical].add(alias)
        self._families = self._load_families(family_path)
        self._family_index: dict[str, str] = {}
        for family, members in self._families.items():
            for member in members:
                self._family_index.setdefault(member, family)

    @staticmethod
    def _normalize(raw: str) -> str:
        return re.sub(r"\s+", " ", (raw or "").strip().lower())

    @staticmethod
    def _load_synonyms(path: Path) -> dict[str, str]:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        return {str(key).strip().lower(): str(value) for key, value in raw.items()}

    @staticmethod
    def _load_families(path: Path) -> dict[str, set[str]]:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        return {str(name): {str(item).strip().lower() for item in items} for name, items in raw.items()}

    def normalize_skill(self, raw: str) -> tuple[str, str | None]:
        normalized = self._normalize(raw)
        canonical_skill_id = self._synonyms.get(normalized)
        return normalized, canonical_skill_id

    def aliases(self, canonical_id: str) -> set[str]:
        return set(self._aliases.get(canonical_id, set()))

    def family_of(self, raw: str) -> str | None:
        normalized, canonical = self.normalize_skill(raw)
        if canonical and canonical in self._family_index:
            return self._family_index[canonical]
        return self._family_index.get(normalized)

    def family_members(self, family: str) -> set[str]:
        members = set(self._families.get(family, set()))
        expanded = set(members)
        for member in members:
            expanded |= self.aliases(member)
        return expanded
