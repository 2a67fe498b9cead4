"""Formula evaluation entry points.

formula string -> parse (tokens classified) -> resolve tokens against
stats / parameters / manual data / content assets -> walk the tree ->
number, string or NA.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from chartcalc.core.exceptions import FormulaSyntaxError
from chartcalc.core.logging import get_logger
from chartcalc.formula.evaluator import FormulaEvaluator
from chartcalc.formula.parser import TokenNode, get_parser
from chartcalc.formula.resolver import TokenResolver
from chartcalc.formula.results import NA, FormulaResult
from chartcalc.formula.stats import SAMPLE_STATS, StatsRecord, ensure_derived_metrics
from chartcalc.schemas.formula import ContentAsset

logger = get_logger(__name__)

ContentAssets = Iterable[ContentAsset | Mapping[str, Any]]


def evaluate_formula(
    formula: str,
    stats: StatsRecord | None = None,
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
    content_assets: ContentAssets | None = None,
) -> FormulaResult:
    """
    Evaluate a formula against its data sources.

    Missing fields, parameters and manual values count as 0, so a lone
    "[missingField]" evaluates to 0, not NA.

    Args:
        formula: Formula string, e.g. "([female]+[male])/[approvedImages]"
        stats: Statistics record
        parameters: Values for [PARAM:key] tokens
        manual_data: Values for [MANUAL:key] tokens
        content_assets: Assets for [MEDIA:slug] / [TEXT:slug] tokens

    Returns:
        Finite float, string, or NA
    """
    try:
        ast = get_parser().parse(formula)
    except FormulaSyntaxError as e:
        logger.debug(e.reason, extra={"formula": formula})
        return NA

    resolver = TokenResolver(stats, parameters, manual_data, content_assets)
    return FormulaEvaluator(resolver).evaluate(ast)


def evaluate_formulas_batch(
    formulas: list[str],
    stats: StatsRecord | None = None,
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
    content_assets: ContentAssets | None = None,
) -> list[FormulaResult]:
    """Evaluate several formulas against the same data."""
    # Materialise once: an iterator of assets would be exhausted by the first formula
    assets = list(content_assets or ())
    return [
        evaluate_formula(formula, stats, parameters, manual_data, assets) for formula in formulas
    ]


def evaluate_formula_safe(
    formula: str,
    stats: StatsRecord | None = None,
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
    content_assets: ContentAssets | None = None,
) -> FormulaResult:
    """Evaluate after filling in missing derived totals on a copy of the record."""
    return evaluate_formula(
        formula, ensure_derived_metrics(stats or {}), parameters, manual_data, content_assets
    )


@dataclass(frozen=True)
class BatchResult:
    formula: str
    result: FormulaResult
    valid: bool


def evaluate_formula_batch_safe(
    formulas: list[str],
    stats: StatsRecord | None = None,
    parameters: Mapping[str, Any] | None = None,
    manual_data: Mapping[str, Any] | None = None,
    content_assets: ContentAssets | None = None,
) -> list[BatchResult]:
    """
    Enrich the record once, then evaluate every formula.

    valid is False when the record lacks a field the formula references;
    the result is still computed with those fields as 0.
    """
    from chartcalc.formula.validator import validate_stats_for_formula

    enriched = ensure_derived_metrics(stats or {})
    assets = list(content_assets or ())
    return [
        BatchResult(
            formula=formula,
            result=evaluate_formula(formula, enriched, parameters, manual_data, assets),
            valid=validate_stats_for_formula(formula, enriched).valid,
        )
        for formula in formulas
    ]


def evaluate_with_sample_data(formula: str) -> tuple[FormulaResult, dict[str, float]]:
    """
    Evaluate a formula against a realistic sample record.

    Returns:
        Tuple of (result, sample record used)
    """
    sample = dict(SAMPLE_STATS)
    return evaluate_formula(formula, sample), sample


def resolve_content_asset_token(formula: str, content_assets: ContentAssets) -> FormulaResult:
    """
    Resolve a formula that is a single [MEDIA:slug] or [TEXT:slug] token.

    Returns:
        The asset URL / text, or NA if the formula is anything else or the
        asset is missing or of the wrong type
    """
    try:
        ast = get_parser().parse(formula)
    except FormulaSyntaxError:
        return NA
    if not isinstance(ast, TokenNode) or not ast.token.is_asset:
        return NA
    return TokenResolver(content_assets=content_assets).resolve_asset(ast.token)
