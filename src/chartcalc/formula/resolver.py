"""Token resolution against the formula data sources.

Resolution per token kind:

- PARAM / MANUAL: caller supplied maps; a missing key is 0
- MEDIA / TEXT: content assets; absent or wrong type is NA
- field: derived fields first, then the record; a missing field is 0
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from chartcalc.core.logging import get_logger
from chartcalc.formula.results import NA, FormulaResult, NotApplicable, coerce_number
from chartcalc.formula.stats import StatsRecord, compute_derived_field, is_derived_field
from chartcalc.formula.tokens import TOKEN_PATTERN, FormulaToken, TokenKind, classify_token
from chartcalc.schemas.formula import ContentAsset

logger = get_logger(__name__)

# Legacy formulas address fields as [stats.name]
STATS_PREFIX = "stats."

_ASSET_TYPES = {TokenKind.MEDIA: "image", TokenKind.TEXT: "text"}


def index_content_assets(
    assets: Iterable[ContentAsset | Mapping[str, Any]] | None,
) -> dict[str, ContentAsset]:
    """
    Build a slug -> asset index.

    Raw mappings are validated into ContentAsset; malformed ones are skipped.
    The first asset with a given slug wins.
    """
    index: dict[str, ContentAsset] = {}
    for raw in assets or ():
        if isinstance(raw, ContentAsset):
            asset = raw
        else:
            try:
                asset = ContentAsset.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed content asset: {e.error_count()} errors")
                continue
        index.setdefault(asset.slug, asset)
    return index


def _data_value(value: Any) -> float | str | None:
    """Numeric values become floats, other strings stay strings, anything else is absent."""
    number = coerce_number(value)
    if number is not None:
        return number
    if isinstance(value, str):
        return value
    return None


class TokenResolver:
    """
    Resolves classified tokens to values for one evaluation.

    A resolver holds references to the caller's data and is not shared
    between evaluations.
    """

    def __init__(
        self,
        stats: StatsRecord | None = None,
        parameters: Mapping[str, Any] | None = None,
        manual_data: Mapping[str, Any] | None = None,
        content_assets: Iterable[ContentAsset | Mapping[str, Any]] | None = None,
    ) -> None:
        self._stats = stats or {}
        self._parameters = parameters or {}
        self._manual_data = manual_data or {}
        self._assets = index_content_assets(content_assets)

    def resolve(self, token: FormulaToken) -> FormulaResult:
        """Resolve a token to a number, a string, or NA."""
        if token.kind is TokenKind.PARAM:
            return self._lookup(self._parameters, token.key)
        if token.kind is TokenKind.MANUAL:
            return self._lookup(self._manual_data, token.key)
        if token.is_asset:
            return self.resolve_asset(token)
        return self.resolve_field(token.key)

    def _lookup(self, source: Mapping[str, Any], key: str) -> float | str:
        value = _data_value(source.get(key))
        return 0.0 if value is None else value

    def resolve_asset(self, token: FormulaToken) -> str | NotApplicable:
        asset = self._assets.get(token.key)
        if asset is None:
            logger.debug(f"Content asset not found: {token.key}")
            return NA
        if asset.type != _ASSET_TYPES[token.kind]:
            logger.debug(f"Content asset {token.key} is {asset.type}, expected {token.kind.value}")
            return NA
        value = asset.value
        return NA if value is None else value

    def resolve_field(self, path: str) -> float | str:
        """
        Resolve a field reference, optionally a dotted path.

        Returns:
            The field value, 0 if the field is missing
        """
        if path.startswith(STATS_PREFIX):
            path = path[len(STATS_PREFIX) :]

        if is_derived_field(path):
            return compute_derived_field(path, self._stats)

        value: Any = self._stats
        for part in path.split("."):
            if not isinstance(value, Mapping):
                value = None
                break
            value = value.get(part)

        resolved = _data_value(value)
        return 0.0 if resolved is None else resolved


def format_literal(value: FormulaResult) -> str:
    """Render a resolved value as a formula literal."""
    if value is NA:
        return '"NA"'
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if not math.isfinite(value):
        return '"NA"'
    if value == int(value):
        text = str(int(value))
    else:
        text = repr(value)
    return f"({text})" if value < 0 else text


def substitute_variables(
    formula: str,
    stats: StatsRecord | None = None,
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
    content_assets: Iterable[ContentAsset | Mapping[str, Any]] | None = None,
) -> str:
    """
    Replace every token in a formula with its literal value.

    Unrecognised token bodies are left in place. The result is meant for
    previews and debugging; evaluation works on the parsed formula.

    Args:
        formula: Formula string
        stats: Statistics record
        parameters: Values for [PARAM:key] tokens
        manual_data: Values for [MANUAL:key] tokens
        content_assets: Assets for [MEDIA:slug] / [TEXT:slug] tokens

    Returns:
        Formula with tokens replaced by literals
    """
    resolver = TokenResolver(stats, parameters, manual_data, content_assets)

    def replace(match) -> str:
        token = classify_token(match.group(1))
        if token is None:
            return match.group(0)
        return format_literal(resolver.resolve(token))

    return TOKEN_PATTERN.sub(replace, formula)
