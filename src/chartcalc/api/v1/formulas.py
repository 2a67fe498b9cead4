"""
Formula endpoints.

Evaluation, validation and substitution preview for chart formulas, plus
read access to the cached variable registry and content assets.
"""

from fastapi import APIRouter

from chartcalc.api.deps import ContentAssetCache, VariableCache
from chartcalc.core.logging import get_logger
from chartcalc.formula.engine import evaluate_formula, evaluate_formula_batch_safe
from chartcalc.formula.resolver import substitute_variables
from chartcalc.formula.results import FormulaResult, is_na, to_display
from chartcalc.formula.tokens import extract_tokens
from chartcalc.formula.validator import find_unknown_variables, validate_formula
from chartcalc.schemas.formula import (
    BatchEvaluateRequest,
    BatchEvaluateResponse,
    BatchItem,
    ContentAsset,
    EvaluateRequest,
    EvaluateResponse,
    SubstituteResponse,
    ValidateRequest,
    ValidateResponse,
    VariableMetadata,
)

logger = get_logger(__name__)

router = APIRouter()


def _uses_assets(*formulas: str) -> bool:
    return any(token.is_asset for formula in formulas for token in extract_tokens(formula))


async def _assets_for(asset_cache: ContentAssetCache, *formulas: str) -> list[ContentAsset]:
    """Only touch the asset cache when a formula references an asset."""
    if not _uses_assets(*formulas):
        return []
    return await asset_cache.get()


def _response(formula: str, result: FormulaResult) -> EvaluateResponse:
    return EvaluateResponse(formula=formula, result=to_display(result), is_na=is_na(result))


@router.post("/formulas/evaluate", response_model=EvaluateResponse)
async def evaluate(
    body: EvaluateRequest,
    asset_cache: ContentAssetCache,
) -> EvaluateResponse:
    """Evaluate one formula against the supplied data."""
    assets = await _assets_for(asset_cache, body.formula)
    result = evaluate_formula(
        body.formula,
        body.stats,
        parameters=body.parameters,
        manual_data=body.manual_data,
        content_assets=assets,
    )
    return _response(body.formula, result)


@router.post("/formulas/evaluate-batch", response_model=BatchEvaluateResponse)
async def evaluate_batch(
    body: BatchEvaluateRequest,
    asset_cache: ContentAssetCache,
) -> BatchEvaluateResponse:
    """Evaluate several formulas; derived totals are filled in once first."""
    assets = await _assets_for(asset_cache, *body.formulas)
    batch = evaluate_formula_batch_safe(
        body.formulas,
        body.stats,
        parameters=body.parameters,
        manual_data=body.manual_data,
        content_assets=assets,
    )
    return BatchEvaluateResponse(
        results=[
            BatchItem(
                formula=item.formula,
                result=to_display(item.result),
                is_na=is_na(item.result),
                valid=item.valid,
            )
            for item in batch
        ]
    )


@router.post("/formulas/validate", response_model=ValidateResponse)
async def validate(
    body: ValidateRequest,
    variable_cache: VariableCache,
) -> ValidateResponse:
    """Validate a formula before it is saved."""
    variables = await variable_cache.get()
    known_fields = [v.name for v in variables if v.is_numeric and not v.derived]

    validation = validate_formula(body.formula, known_fields=known_fields)
    # The registry was refreshed above; the check reads that snapshot
    unknown = find_unknown_variables(body.formula, variable_cache)
    if unknown:
        logger.info(
            "Formula references unregistered variables",
            extra={"formula": body.formula, "unknown": unknown},
        )

    evaluated = validation.evaluated_result
    return ValidateResponse(
        is_valid=validation.is_valid,
        error=validation.error,
        used_variables=validation.used_variables,
        unknown_variables=unknown,
        evaluated_result=None if evaluated is None else to_display(evaluated),
    )


@router.post("/formulas/substitute", response_model=SubstituteResponse)
async def substitute(
    body: EvaluateRequest,
    asset_cache: ContentAssetCache,
) -> SubstituteResponse:
    """Preview a formula with its tokens replaced by literal values."""
    assets = await _assets_for(asset_cache, body.formula)
    substituted = substitute_variables(
        body.formula,
        body.stats,
        parameters=body.parameters,
        manual_data=body.manual_data,
        content_assets=assets,
    )
    return SubstituteResponse(formula=body.formula, substituted=substituted)


@router.get("/variables", response_model=list[VariableMetadata])
async def list_variables(variable_cache: VariableCache) -> list[VariableMetadata]:
    """Variable registry (cached)."""
    return await variable_cache.get()


@router.get("/content-assets", response_model=list[ContentAsset])
async def list_content_assets(asset_cache: ContentAssetCache) -> list[ContentAsset]:
    """Content assets (cached)."""
    return await asset_cache.get()
