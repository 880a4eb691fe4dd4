from enum import IntEnum
from typing import Dict, List, Optional, Sequence

from app.utils.logger import logger

# Known column names per canonical field (lower case, Dutch and English).
FIELD_ALIASES: Dict[str, List[str]] = {
    "omzet": [
        "omzet", "revenue", "turnover", "sales", "verkoop", "opbrengsten",
        "totale omzet", "total revenue", "netto omzet", "bruto omzet",
    ],
    "nettowinst": [
        "nettowinst", "net profit", "net income", "winst", "profit",
        "netto resultaat", "resultaat", "earnings", "netto winst",
    ],
    "eigenVermogen": [
        "eigen vermogen", "equity", "shareholders equity", "eigendom",
        "eigen kapitaal", "kapitaal", "vermogen", "equity capital",
    ],
    "vlottendeActiva": [
        "vlottende activa", "current assets", "liquide middelen", "vlottend",
        "current", "kortlopende activa", "liquidity", "cash and equivalents",
    ],
    "kortlopendeSchulden": [
        "kortlopende schulden", "current liabilities", "short term debt",
        "kortlopend", "current debt", "schulden kort", "payables",
    ],
    "totaalActiva": [
        "totaal activa", "total assets", "balanstotaal", "activa totaal",
        "total", "assets", "bezittingen", "activa",
    ],
}


class MatchTier(IntEnum):
    """Strength of a header/alias match. Higher wins."""
    NONE = 0
    WORD_OVERLAP = 25
    SUBSTRING = 50
    EXACT = 100


def score_header(header: str, alias: str) -> MatchTier:
    """
    Score one header against one alias, case-insensitively.

    EXACT: equal after trimming and lower-casing.
    SUBSTRING: either string contains the other.
    WORD_OVERLAP: some header word and some alias word contain one another.
    """
    header_lower = header.strip().lower()
    alias_lower = alias.strip().lower()
    # Blank headers never match, though as a substring they would fit every alias
    if not header_lower or not alias_lower:
        return MatchTier.NONE

    if header_lower == alias_lower:
        return MatchTier.EXACT
    if alias_lower in header_lower or header_lower in alias_lower:
        return MatchTier.SUBSTRING

    alias_words = alias_lower.split()
    for word in header_lower.split():
        if any(word in alias_word or alias_word in word for alias_word in alias_words):
            return MatchTier.WORD_OVERLAP
    return MatchTier.NONE


def match_field(headers: Sequence[str], aliases: Sequence[str]) -> Optional[str]:
    """
    Return the best header for one field, or None.

    An exact match ends the search. Otherwise the first header to reach a tier
    keeps it; only a strictly higher tier replaces it.
    """
    best_match: Optional[str] = None
    best_tier = MatchTier.NONE

    for header in headers:
        if not isinstance(header, str):
            continue
        for alias in aliases:
            tier = score_header(header, alias)
            if tier == MatchTier.EXACT:
                return header
            if tier > best_tier:
                best_match = header
                best_tier = tier

    return best_match


def match_columns(headers: Sequence[str]) -> Dict[str, Optional[str]]:
    """
    Map every canonical field to its best-matching header (or None).

    Fields are matched independently: one header may be claimed by more than
    one field.
    """
    mapping: Dict[str, Optional[str]] = {}
    for field, aliases in FIELD_ALIASES.items():
        mapping[field] = match_field(headers, aliases)
        logger.debug(f"Column match: {field} -> {mapping[field]}")
    return mapping
