"""Formula validation for ChartCalc.

Pre-flight checks run before a formula is saved. Passing validation
means the formula is mechanically well formed; it does not promise a
number against real, possibly incomplete, data.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from chartcalc.cache.metadata_cache import MetadataCache
from chartcalc.core.exceptions import FormulaSyntaxError
from chartcalc.core.logging import get_logger
from chartcalc.formula.engine import evaluate_formula
from chartcalc.formula.parser import get_parser
from chartcalc.formula.resolver import STATS_PREFIX
from chartcalc.formula.results import FormulaResult
from chartcalc.formula.stats import StatsRecord, is_derived_field, synthetic_stats
from chartcalc.formula.tokens import TokenKind, classify_token, extract_variables_from_formula
from chartcalc.schemas.formula import VariableMetadata

logger = get_logger(__name__)

UNBALANCED_CLOSING = "Unbalanced parentheses: closing parenthesis without opening"
UNCLOSED_OPENING = "Unbalanced parentheses: unclosed opening parenthesis"


@dataclass
class FormulaValidationResult:
    is_valid: bool
    used_variables: list[str]
    error: str | None = None
    evaluated_result: FormulaResult | None = None


@dataclass
class StatsValidationResult:
    valid: bool
    missing_variables: list[str] = field(default_factory=list)
    available_variables: list[str] = field(default_factory=list)
    # Missing fields evaluate as 0, so evaluation is always possible
    can_evaluate: bool = True


def check_parentheses(formula: str) -> str | None:
    """
    Check that parentheses are balanced.

    Returns:
        Error message, or None if balanced
    """
    depth = 0
    for char in formula:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return UNBALANCED_CLOSING
    if depth > 0:
        return UNCLOSED_OPENING
    return None


def validate_formula(
    formula: str,
    known_fields: Iterable[str] | None = None,
) -> FormulaValidationResult:
    """
    Validate a formula before it is saved.

    Checks parenthesis balance, then syntax, then evaluates the formula
    once against a record where every known base field is 1.

    Args:
        formula: Formula string
        known_fields: Extra field names (e.g. from the variable registry)
            to set to 1 in the trial record

    Returns:
        FormulaValidationResult
    """
    used_variables = extract_variables_from_formula(formula)

    error = check_parentheses(formula)
    if error:
        return FormulaValidationResult(is_valid=False, error=error, used_variables=used_variables)

    try:
        get_parser().parse(formula)
    except FormulaSyntaxError as e:
        return FormulaValidationResult(
            is_valid=False, error=e.message, used_variables=used_variables
        )

    trial_stats = synthetic_stats(list(known_fields or ()))
    result = evaluate_formula(formula, trial_stats)
    logger.debug("Trial evaluation", extra={"formula": formula, "result": result})

    return FormulaValidationResult(
        is_valid=True,
        used_variables=used_variables,
        evaluated_result=result,
    )


def validate_stats_for_formula(formula: str, stats: StatsRecord) -> StatsValidationResult:
    """
    Check whether a record holds every field a formula references.

    PARAM, MANUAL and asset tokens are not record fields and are ignored;
    derived fields are always available.

    Args:
        formula: Formula string
        stats: Statistics record

    Returns:
        StatsValidationResult listing missing and available fields
    """
    missing: list[str] = []
    available: list[str] = []

    for literal in extract_variables_from_formula(formula):
        token = classify_token(literal)
        if token is None or token.kind is not TokenKind.FIELD:
            continue

        name = token.key.removeprefix(STATS_PREFIX)
        if is_derived_field(name) or stats.get(name) is not None:
            available.append(literal)
        else:
            missing.append(name)

    return StatsValidationResult(
        valid=not missing,
        missing_variables=missing,
        available_variables=available,
    )


def _registry_names(variables: Iterable[VariableMetadata | Mapping[str, Any]]) -> set[str]:
    names = set()
    for variable in variables:
        name = variable.get("name") if isinstance(variable, Mapping) else variable.name
        if name:
            names.add(name)
    return names


def is_valid_variable(
    variable_name: str,
    variables: Iterable[VariableMetadata | Mapping[str, Any]],
) -> bool:
    """
    Check a token body against the variable registry.

    PARAM and MANUAL tokens are resolved at runtime and always valid. An
    empty registry (not loaded yet, or unavailable) is permissive.

    Args:
        variable_name: Token body, e.g. "female" or "stats.female"
        variables: Current registry snapshot

    Returns:
        True if the variable is known or cannot be checked
    """
    token = classify_token(variable_name)
    if token is not None and token.is_external:
        return True

    names = _registry_names(variables)
    if not names:
        logger.warning(f"Variable registry empty, cannot validate: {variable_name}")
        return True

    return variable_name in names or variable_name.removeprefix(STATS_PREFIX) in names


def is_registered_variable(
    variable_name: str,
    cache: MetadataCache[VariableMetadata],
) -> bool:
    """
    Registry check for call sites that cannot await.

    Reads whatever the cache holds and never triggers a refresh, so an
    unloaded cache is permissive like an empty registry.
    """
    return is_valid_variable(variable_name, cache.get_cached())


def find_unknown_variables(formula: str, cache: MetadataCache[VariableMetadata]) -> list[str]:
    """
    Field tokens of a formula that the cached registry does not know.

    Asset tokens are checked against content assets, not the registry, and
    are skipped.
    """
    unknown = []
    for literal in extract_variables_from_formula(formula):
        token = classify_token(literal)
        if token is not None and token.is_asset:
            continue
        if not is_registered_variable(literal, cache):
            unknown.append(literal)
    return unknown


def get_variable_example(
    variable_name: str,
    variables: Iterable[VariableMetadata],
) -> str | None:
    """Example formula for a registry variable, if it has one."""
    for variable in variables:
        if variable.name == variable_name:
            return variable.example_usage
    return None
