"""Formula engine for ChartCalc.

This module provides the report formula evaluation system supporting:
- Arithmetic operations (+, -, *, /) with unary minus and parentheses
- Bracketed tokens: [field], [PARAM:key], [MANUAL:key], [MEDIA:slug], [TEXT:slug]
- Math functions (MAX, MIN, ROUND, ABS)
- Derived fields (totalFans, remoteFans, allImages, totalUnder40, totalOver40)
- The NA sentinel for values that cannot be computed
"""

from chartcalc.formula.engine import (
    evaluate_formula,
    evaluate_formula_batch_safe,
    evaluate_formula_safe,
    evaluate_formulas_batch,
    evaluate_with_sample_data,
    resolve_content_asset_token,
)
from chartcalc.formula.evaluator import FormulaEvaluator, evaluate_expression
from chartcalc.formula.functions import FORMULA_FUNCTIONS, register_function
from chartcalc.formula.parser import FormulaParser
from chartcalc.formula.resolver import TokenResolver, substitute_variables
from chartcalc.formula.results import NA, FormulaResult, NotApplicable, is_na
from chartcalc.formula.tokens import FormulaToken, TokenKind, extract_variables_from_formula
from chartcalc.formula.validator import (
    find_unknown_variables,
    get_variable_example,
    is_registered_variable,
    is_valid_variable,
    validate_formula,
    validate_stats_for_formula,
)

__all__ = [
    "NA",
    "FORMULA_FUNCTIONS",
    "FormulaEvaluator",
    "FormulaParser",
    "FormulaResult",
    "FormulaToken",
    "NotApplicable",
    "TokenKind",
    "TokenResolver",
    "evaluate_expression",
    "evaluate_formula",
    "evaluate_formula_batch_safe",
    "evaluate_formula_safe",
    "evaluate_formulas_batch",
    "evaluate_with_sample_data",
    "extract_variables_from_formula",
    "find_unknown_variables",
    "get_variable_example",
    "is_na",
    "is_registered_variable",
    "is_valid_variable",
    "register_function",
    "resolve_content_asset_token",
    "substitute_variables",
    "validate_formula",
    "validate_stats_for_formula",
]
