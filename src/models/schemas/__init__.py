"""
Centralized API schemas for the LLM Connector.

Request/response models organized by domain, with OpenAPI examples.
"""

from models.error_models import ErrorDetail, ErrorResponse
from models.schemas.config import (
    ConfigResponse,
    EvaluationCategoryItem,
    EvaluationTypeItem,
    EvaluatorItem,
    ProviderItem,
    SavedPromptItem,
)
from models.schemas.connector import (
    JsonFormatResponse,
    JsonTextRequest,
    JsonValidationResponse,
    PayloadResponse,
    RunResponse,
    SchemaInferenceRequest,
    SchemaInferenceResponse,
)
from models.schemas.health import (
    HealthResponse,
    LivenessResponse,
    OpenAIHealth,
)
from models.schemas.openai import (
    ModelListResponse,
    ModerationRequest,
    VectorStoreCreateRequest,
)

__all__ = [
    "ConfigResponse",
    "ErrorDetail",
    "ErrorResponse",
    "EvaluationCategoryItem",
    "EvaluationTypeItem",
    "EvaluatorItem",
    "HealthResponse",
    "JsonFormatResponse",
    "JsonTextRequest",
    "JsonValidationResponse",
    "LivenessResponse",
    "ModelListResponse",
    "ModerationRequest",
    "OpenAIHealth",
    "PayloadResponse",
    "ProviderItem",
    "RunResponse",
    "SavedPromptItem",
    "SchemaInferenceRequest",
    "SchemaInferenceResponse",
    "VectorStoreCreateRequest",
]
