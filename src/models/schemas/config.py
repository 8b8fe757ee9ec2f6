"""
Configuration API schemas.

Static catalog the connector form is built from: providers and their
models, evaluation tables, evaluator tools, saved prompts and upload limits.
Keys are camelCase to match the form.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProviderItem(BaseModel):
    """Provider entry for the provider selector."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "OpenAI",
                "label": "OpenAI ChatGPT",
                "icon": "/logos/openai.svg",
                "models": ["gpt-4.1", "gpt-4.1-mini"],
                "apis": ["Responses API"],
                "supportsMaxTokens": True,
            }
        }
    )

    id: str = Field(..., description="Provider key used in connector configs")
    label: str = Field(..., description="Human-readable provider name")
    icon: str = Field(..., description="Logo asset path")
    models: list[str] = Field(default_factory=list, description="Models in display order")
    apis: list[str] = Field(default_factory=list, description="APIs a request body can be generated for")
    supportsMaxTokens: bool = Field(default=True, description="Whether the max tokens field is shown")


class EvaluationTypeItem(BaseModel):
    """One evaluation type within a category."""

    value: str = Field(..., json_schema_extra={"example": "toxicity_check"})
    label: str = Field(..., json_schema_extra={"example": "Toxicity Check (Online)"})
    description: str = Field(default="")
    hasScore: bool = Field(default=True, description="Whether a target score and retry policy apply")


class EvaluationCategoryItem(BaseModel):
    """Evaluation category with its types in display order."""

    category: str = Field(..., json_schema_extra={"example": "Content Safety"})
    types: list[EvaluationTypeItem] = Field(default_factory=list)


class EvaluatorItem(BaseModel):
    """External evaluation tool."""

    value: str = Field(..., json_schema_extra={"example": "arize"})
    label: str = Field(..., json_schema_extra={"example": "Arize"})
    icon: str = Field(..., json_schema_extra={"example": "/logos/arize.png"})


class SavedPromptItem(BaseModel):
    """User prompt preset."""

    label: str
    value: str


class ConfigResponse(BaseModel):
    """Form catalog returned by GET /config."""

    providers: list[ProviderItem] = Field(..., description="Provider catalog in display order")
    defaultProvider: str = Field(..., json_schema_extra={"example": "OpenAI"})
    defaultModel: str = Field(..., json_schema_extra={"example": "gpt-4.1"})
    searchContextSizes: list[str] = Field(default_factory=list)
    evaluationCategories: list[EvaluationCategoryItem] = Field(default_factory=list)
    evaluators: list[EvaluatorItem] = Field(default_factory=list)
    evaluatorPromptTemplate: str = Field(default="", description="Starting text of a custom evaluation prompt")
    savedPrompts: list[SavedPromptItem] = Field(default_factory=list)
    maxUploadSize: int = Field(..., ge=0, description="Maximum upload file size in bytes")
    allowedUploadTypes: list[str] = Field(default_factory=list, description="Accepted upload MIME types")
    version: str = Field(..., description="API version", json_schema_extra={"example": "1.0.0"})
