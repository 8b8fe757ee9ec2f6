"""
OpenAI proxy endpoints (v1).

Keeps the API key server-side while the form uploads files, manages
vector stores, lists models and runs moderation checks.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, File, UploadFile

from api.dependencies import OpenAIProxy
from models.schemas.openai import ModelListResponse, ModerationRequest, VectorStoreCreateRequest

router = APIRouter()


@router.post(
    "/files",
    summary="Upload file",
    description="Upload a text, CSV or PDF file (max 5 MB) for use with file search.",
)
async def upload_file(proxy: OpenAIProxy, file: UploadFile = File(...)) -> dict[str, Any]:
    content = await file.read()
    return await proxy.upload_file(file.filename or "upload", content, file.content_type)


@router.post(
    "/vector-stores",
    summary="Create vector store",
)
async def create_vector_store(request: VectorStoreCreateRequest, proxy: OpenAIProxy) -> dict[str, Any]:
    return await proxy.create_vector_store(
        file_ids=request.file_ids,
        name=request.name,
        expires_in_days=request.expires_in_days,
    )


@router.get(
    "/vector-stores",
    summary="List vector stores",
)
async def list_vector_stores(proxy: OpenAIProxy) -> dict[str, Any]:
    return await proxy.list_vector_stores()


@router.get(
    "/models",
    response_model=ModelListResponse,
    summary="List models",
    description="Model IDs starting with 'gpt-' or 'o', sorted.",
)
async def list_models(proxy: OpenAIProxy) -> ModelListResponse:
    return ModelListResponse(models=await proxy.list_models())


@router.post(
    "/moderations",
    summary="Moderate text",
    description="Run the moderation endpoint; the first result's category scores are rounded to 5 decimals.",
)
async def moderate(request: ModerationRequest, proxy: OpenAIProxy) -> dict[str, Any]:
    return await proxy.moderate(request.input)
