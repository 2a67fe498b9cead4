"""Formula, variable registry and content asset schemas."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Metadata records (consumed from the registry / asset endpoints)
# =============================================================================


class VariableFlags(BaseModel):
    """Where a variable is editable."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    visible_in_clicker: bool = Field(False, alias="visibleInClicker")
    editable_in_manual: bool = Field(False, alias="editableInManual")


class VariableMetadata(BaseModel):
    """Registry entry describing a legitimate field token."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str = Field(..., min_length=1, description="Field name used in [name] tokens")
    label: str = Field("", description="Display label")
    category: str = Field("", description="Grouping category")
    type: str = Field("count", description="count, percentage, currency, numeric, text, ...")
    description: Optional[str] = None
    unit: Optional[str] = None
    derived: bool = False
    formula: Optional[str] = None
    example_usage: Optional[str] = Field(None, alias="exampleUsage")
    alias: Optional[str] = None
    order: Optional[int] = None
    is_system: bool = Field(False, alias="isSystem")
    flags: Optional[VariableFlags] = None

    @property
    def is_numeric(self) -> bool:
        return self.type not in ("text", "boolean", "date")


class ContentAssetContent(BaseModel):
    """Type-specific payload: url for images, text for text assets."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[Literal["16:9", "9:16", "1:1"]] = Field(None, alias="aspectRatio")
    file_size: Optional[int] = Field(None, alias="fileSize")
    text: Optional[str] = None


class ContentAsset(BaseModel):
    """Image or text asset referenced by [MEDIA:slug] / [TEXT:slug] tokens."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    slug: str = Field(..., min_length=1)
    type: Literal["image", "text"]
    content: ContentAssetContent = Field(default_factory=ContentAssetContent)
    title: str = ""
    description: Optional[str] = None
    category: str = ""
    tags: tuple[str, ...] = ()
    usage_count: int = Field(0, alias="usageCount")

    @property
    def value(self) -> Optional[str]:
        """URL for images, text for text assets."""
        if self.type == "image":
            return self.content.url
        return self.content.text


# =============================================================================
# API request / response bodies
# =============================================================================


class FormulaInput(BaseModel):
    """Data sources shared by evaluation requests."""

    model_config = ConfigDict(populate_by_name=True)

    stats: dict[str, Any] = Field(default_factory=dict, description="Statistics record")
    parameters: Optional[dict[str, Any]] = Field(None, description="[PARAM:key] values")
    manual_data: Optional[dict[str, Any]] = Field(
        None, alias="manualData", description="[MANUAL:key] values"
    )


class EvaluateRequest(FormulaInput):
    """Schema for evaluating one formula."""

    formula: str = Field(..., max_length=2000, description="Formula string")


class BatchEvaluateRequest(FormulaInput):
    """Schema for evaluating several formulas against the same data."""

    formulas: list[str] = Field(..., max_length=500, description="Formula strings")


class EvaluateResponse(BaseModel):
    """Schema for an evaluation result. NA is rendered as the string "NA"."""

    formula: str
    result: float | str
    is_na: bool


class BatchItem(EvaluateResponse):
    """One batch entry; valid is False when the record lacks referenced fields."""

    valid: bool


class BatchEvaluateResponse(BaseModel):
    """Schema for batch evaluation."""

    results: list[BatchItem]


class ValidateRequest(BaseModel):
    """Schema for validating a formula before it is saved."""

    formula: str = Field(..., max_length=2000)


class ValidateResponse(BaseModel):
    """Schema for formula validation result."""

    is_valid: bool
    error: Optional[str] = None
    used_variables: list[str]
    unknown_variables: list[str] = Field(default_factory=list)
    evaluated_result: Optional[float | str] = None


class SubstituteResponse(BaseModel):
    """Schema for the token substitution preview."""

    formula: str
    substituted: str
