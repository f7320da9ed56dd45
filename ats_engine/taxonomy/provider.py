from __future__ import annotations

from typing import Protocol


class TaxonomyProvider(Protocol):
    def normalize_skill(self, raw: str) -> tuple[str, str | None]:
        """Return normalized text and optional canonical skill ID."""

    def aliases(self, canonical_id: str) -> set[str]:
        """Return every known surface form of a canonical skill."""

    def family_of(self, raw: str) -> str | None:
        """Return the technology family a term belongs to, if any."""

    def family_members(self, family: str) -> set[str]:
        """Return every term listed under a technology family."""
