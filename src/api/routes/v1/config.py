"""
Configuration endpoints (v1).

Serves the static catalog the connector form is built from.
"""

from __future__ import annotations

from fastapi import APIRouter

from api.dependencies import AppSettings
from core.constants import (
    ALLOWED_UPLOAD_CONTENT_TYPES,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    EVALUATION_CATEGORIES,
    EVALUATION_TYPE_DESCRIPTIONS,
    EVALUATION_TYPE_LABELS,
    EVALUATOR_OPTIONS,
    EVALUATOR_PROMPT_TEMPLATE,
    PROVIDER_CONFIGS,
    SAVED_PROMPTS,
    SEARCH_CONTEXT_SIZES,
    TYPES_WITHOUT_SCORE_AND_RETRY,
)
from models.schemas.config import (
    ConfigResponse,
    EvaluationCategoryItem,
    EvaluationTypeItem,
    EvaluatorItem,
    ProviderItem,
    SavedPromptItem,
)

router = APIRouter()


def _evaluation_categories() -> list[EvaluationCategoryItem]:
    return [
        EvaluationCategoryItem(
            category=category,
            types=[
                EvaluationTypeItem(
                    value=eval_type,
                    label=EVALUATION_TYPE_LABELS.get(eval_type, eval_type),
                    description=EVALUATION_TYPE_DESCRIPTIONS.get(eval_type, ""),
                    hasScore=eval_type not in TYPES_WITHOUT_SCORE_AND_RETRY,
                )
                for eval_type in types
            ],
        )
        for category, types in EVALUATION_CATEGORIES.items()
    ]


@router.get(
    "/config",
    response_model=ConfigResponse,
    summary="Get configuration",
    description="Provider catalog, evaluation tables, evaluator tools, saved prompts and upload limits.",
)
async def get_config(settings: AppSettings) -> ConfigResponse:
    """Get the connector form catalog."""
    return ConfigResponse(
        providers=[
            ProviderItem(
                id=provider.id,
                label=provider.label,
                icon=provider.icon,
                models=list(provider.models),
                apis=list(provider.apis),
                supportsMaxTokens=provider.supports_max_tokens,
            )
            for provider in PROVIDER_CONFIGS
        ],
        defaultProvider=DEFAULT_PROVIDER,
        defaultModel=DEFAULT_MODEL,
        searchContextSizes=list(SEARCH_CONTEXT_SIZES),
        evaluationCategories=_evaluation_categories(),
        evaluators=[
            EvaluatorItem(value=key, label=option["label"], icon=option["icon"])
            for key, option in EVALUATOR_OPTIONS.items()
        ],
        evaluatorPromptTemplate=EVALUATOR_PROMPT_TEMPLATE,
        savedPrompts=[SavedPromptItem(label=p["label"], value=p["value"]) for p in SAVED_PROMPTS],
        maxUploadSize=settings.max_upload_size,
        allowedUploadTypes=sorted(ALLOWED_UPLOAD_CONTENT_TYPES),
        version=settings.app_version,
    )
