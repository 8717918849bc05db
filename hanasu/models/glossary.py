"""Keyword glossary data models."""

from dataclasses import dataclass, asdict
from typing import Any, Dict

# Language marker meaning "any language"
WILDCARD = "*"


@dataclass
class GlossaryEntry:
    """A forced term substitution scoped to a language pair."""
    id: str
    term: str
    replacement: str
    source_lang: str = WILDCARD
    target_lang: str = WILDCARD

    @property
    def is_universal(self) -> bool:
        return self.source_lang == WILDCARD and self.target_lang == WILDCARD

    def matches_pair(self, source_lang: str, target_lang: str) -> bool:
        return self.is_universal or (
            self.source_lang == source_lang and self.target_lang == target_lang
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlossaryEntry":
        # Older keyword files stored the replacement under "translation"
        replacement = data.get("replacement", data.get("translation", ""))
        return cls(
            id=str(data["id"]),
            term=data["term"],
            replacement=replacement,
            source_lang=data.get("source_lang", data.get("sourceLang", WILDCARD)),
            target_lang=data.get("target_lang", data.get("targetLang", WILDCARD)),
        )
