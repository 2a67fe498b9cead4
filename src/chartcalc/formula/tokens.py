"""Bracketed token extraction and classification.

Tokens are the ``[...]`` references inside a formula:

- ``[name]`` / ``[stats.name]``  field of the statistics record
- ``[PARAM:key]``               caller supplied parameter
- ``[MANUAL:key]``              caller supplied manual data
- ``[MEDIA:slug]``              image content asset
- ``[TEXT:slug]``               text content asset
"""

import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Kind of a bracketed token, decided once from its prefix."""

    FIELD = "field"
    PARAM = "PARAM"
    MANUAL = "MANUAL"
    MEDIA = "MEDIA"
    TEXT = "TEXT"


@dataclass(frozen=True)
class FormulaToken:
    """A classified token: its kind, lookup key and original body."""

    kind: TokenKind
    key: str
    literal: str

    @property
    def is_external(self) -> bool:
        """Parameters and manual data are resolved by the caller, never the record."""
        return self.kind in (TokenKind.PARAM, TokenKind.MANUAL)

    @property
    def is_asset(self) -> bool:
        return self.kind in (TokenKind.MEDIA, TokenKind.TEXT)


# Hyphen is accepted so asset slugs such as [MEDIA:logo-abc] are extracted
TOKEN_PATTERN = re.compile(r"\[([A-Za-z0-9_:.\-]+)\]")

_KIND_PATTERNS: tuple[tuple[TokenKind, re.Pattern[str]], ...] = (
    (TokenKind.PARAM, re.compile(r"PARAM:([A-Za-z0-9_]+)")),
    (TokenKind.MANUAL, re.compile(r"MANUAL:([A-Za-z0-9_]+)")),
    (TokenKind.MEDIA, re.compile(r"MEDIA:([a-z0-9-]+)")),
    (TokenKind.TEXT, re.compile(r"TEXT:([a-z0-9-]+)")),
    (TokenKind.FIELD, re.compile(r"([A-Za-z0-9_.]+)")),
)


def classify_token(literal: str) -> FormulaToken | None:
    """
    Classify a token body (the text between the brackets).

    Args:
        literal: Token body, e.g. "female" or "PARAM:jerseyPrice"

    Returns:
        FormulaToken, or None if the body matches no token kind
    """
    for kind, pattern in _KIND_PATTERNS:
        match = pattern.fullmatch(literal)
        if match:
            return FormulaToken(kind=kind, key=match.group(1), literal=literal)
    return None


def extract_variables_from_formula(formula: str) -> list[str]:
    """
    Extract the distinct token bodies referenced by a formula.

    Order of first appearance is preserved. Unterminated brackets simply
    produce no match; this never raises.

    Args:
        formula: Formula string

    Returns:
        List of token bodies, e.g. ["female", "male", "PARAM:price"]
    """
    seen: dict[str, None] = {}
    for match in TOKEN_PATTERN.finditer(formula or ""):
        seen.setdefault(match.group(1), None)
    return list(seen)


def extract_tokens(formula: str) -> list[FormulaToken]:
    """Like extract_variables_from_formula but classified; unknown kinds are dropped."""
    tokens = []
    for literal in extract_variables_from_formula(formula):
        token = classify_token(literal)
        if token is not None:
            tokens.append(token)
    return tokens
