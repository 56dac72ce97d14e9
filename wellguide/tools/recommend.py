# wellguide/tools/recommend.py
"""
Deterministic, tiered recommendation lookup.

A RuleTable maps tuples of answer values to advisory text. Lookup walks the
table's tiers from most to least specific; each tier names the answer fields
that form its key, e.g.

    tiers = (("primary_mood", "secondary_mood"), ("primary_mood",))

A tier only applies when every one of its fields has been answered, so a
skipped secondary mood drops straight to the primary-only tier. When no tier
matches, the table's generic fallback is returned. A table without a fallback
cannot be built.

Exports:
- RuleTable(name, tiers, rules, fallback)
- resolve(table, answers) -> str
- relevant_fields(table) -> frozenset of field names any tier reads
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigurationError, UnresolvedRecommendation
from ..graph.gate import is_filled

Key = Tuple[Any, ...]
Tier = Tuple[str, ...]


# ----------------------------- Utils ----------------------------------------

def _key_part(value: Any) -> Any:
    # Multi-select answers key on their members, not their selection order
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(sorted(value, key=str))
    return value


def _key_for(tier: Tier, answers: Mapping[str, Any]) -> Optional[Key]:
    parts = []
    for name in tier:
        value = answers.get(name)
        if not is_filled(value):
            return None
        parts.append(_key_part(value))
    return tuple(parts)


# ------------------------------ Table ----------------------------------------

class RuleTable:
    """
    Immutable rule table. `rules` may be a mapping or an iterable of
    (key, text) pairs; pairs are checked for duplicate keys.
    """

    __slots__ = ("name", "tiers", "fallback", "_rules")

    def __init__(
        self,
        name: str,
        tiers: Sequence[Sequence[str]],
        rules: Mapping[Key, str] | Iterable[Tuple[Key, str]],
        fallback: str,
    ):
        if not fallback or not fallback.strip():
            raise UnresolvedRecommendation(f"rule table {name!r} has no fallback text")
        if not tiers:
            raise ConfigurationError(f"rule table {name!r} has no tiers")

        normalized_tiers = tuple(tuple(t) for t in tiers)
        widths = {len(t) for t in normalized_tiers}
        if 0 in widths:
            raise ConfigurationError(f"rule table {name!r} has an empty tier")

        pairs = rules.items() if isinstance(rules, Mapping) else rules
        table: Dict[Key, str] = {}
        for key, text in pairs:
            key = tuple(key)
            if key in table:
                raise ConfigurationError(f"rule table {name!r} has duplicate key {key!r}")
            if len(key) not in widths:
                raise ConfigurationError(
                    f"rule table {name!r}: key {key!r} does not fit any tier"
                )
            if not text or not text.strip():
                raise ConfigurationError(f"rule table {name!r}: empty text for {key!r}")
            table[key] = text

        object.__setattr__(self, "name", name)
        object.__setattr__(self, "tiers", normalized_tiers)
        object.__setattr__(self, "fallback", fallback)
        object.__setattr__(self, "_rules", MappingProxyType(table))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("RuleTable is immutable")

    @property
    def rules(self) -> Mapping[Key, str]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({self.name!r}, tiers={self.tiers!r}, rules={len(self)})"


# ---------------------------- Public API ------------------------------------

def resolve(table: RuleTable, answers: Mapping[str, Any]) -> str:
    """
    Most specific matching rule text, else the table's fallback.
    Pure: neither the answers nor the table are touched.
    """
    for tier in table.tiers:
        key = _key_for(tier, answers)
        if key is None:
            continue
        text = table.rules.get(key)
        if text is not None:
            return text
    return table.fallback


def matched_tier(table: RuleTable, answers: Mapping[str, Any]) -> Optional[int]:
    """Index of the tier that produced the text, or None for the fallback."""
    for index, tier in enumerate(table.tiers):
        key = _key_for(tier, answers)
        if key is not None and key in table.rules:
            return index
    return None


def relevant_fields(table: RuleTable) -> FrozenSet[str]:
    out: FrozenSet[str] = frozenset()
    for tier in table.tiers:
        out = out | frozenset(tier)
    return out


__all__ = [
    "RuleTable",
    "resolve",
    "matched_tier",
    "relevant_fields",
]
