"""Versioned HTTP API over the trainer service."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.errors import (
    ConfigError,
    GenerationError,
    NoCredentialError,
    NotFoundError,
    TrainforgeError,
    ValidationError,
)
from llm.providers import PROVIDER_INFO, ProviderTag, get_model_info, provider_models
from training.exporter import FILE_EXTENSIONS, ExportFormat, ExportOptions
from training.schemas import PairInput
from training.service import TrainerService

router = APIRouter(prefix="/api/v1", tags=["api-v1"])

# Checked in order; subclasses before their bases.
STATUS_CODES = (
    (NoCredentialError, 412),
    (ValidationError, 422),
    (NotFoundError, 404),
    (GenerationError, 502),
    (ConfigError, 400),
)

_service: Optional[TrainerService] = None


def get_service() -> TrainerService:
    global _service
    if _service is None:
        _service = TrainerService.from_config(os.getenv("TRAINFORGE_CONFIG"))
    return _service


def _raise_http_error(exc: TrainforgeError) -> None:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            raise HTTPException(status_code=status_code, detail=str(exc)) from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())


class SaveKeyRequest(CamelModel):
    api_key: str


class GenerateRequest(CamelModel):
    model_id: str
    prompt: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    context: Optional[str] = None
    system_prompt: Optional[str] = None
    session_id: Optional[str] = None
    quality_score: Optional[int] = None


class CreateSessionRequest(CamelModel):
    project_id: str
    model_id: Optional[str] = None


class RateRequest(CamelModel):
    quality_score: int = Field(..., description="Score from 1 to 5")


class ProgressRequest(CamelModel):
    progress: float = Field(..., description="Percent complete, 0 to 100")


def _model_details(model_id: str) -> Dict[str, Any]:
    info = get_model_info(model_id)
    return {
        "id": model_id,
        "name": info.name,
        "contextWindow": info.context_window,
        "maxOutputTokens": info.max_output_tokens,
        "supportsVision": info.supports_vision,
        "supportsJson": info.supports_json,
    }


# ── Keys ──────────────────────────────────────────────────────────────

@router.get("/keys")
async def list_keys(service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    return {"keys": [status.to_dict() for status in service.list_keys()]}


@router.put("/keys/{provider}")
async def save_key(
    provider: str,
    payload: SaveKeyRequest,
    service: TrainerService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        credential = service.save_api_key(provider, payload.api_key)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return {"provider": credential.provider, "isActive": credential.is_active}


@router.delete("/keys/{provider}")
async def delete_key(provider: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        service.delete_api_key(provider)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return {"provider": provider, "deleted": True}


@router.get("/keys/{provider}/active")
async def has_active_key(provider: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        active = service.has_active_key(provider)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return {"provider": provider, "active": active}


# ── Generation ────────────────────────────────────────────────────────

@router.post("/generate")
async def generate(payload: GenerateRequest, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        request = service.build_request(
            payload.model_id,
            payload.prompt,
            temperature=payload.temperature,
            max_tokens=payload.max_tokens,
            context=payload.context,
            system_prompt=payload.system_prompt,
        )
        result = await service.generate_content(request)
        pair_id = None
        if payload.session_id:
            pair = service.add_generation(payload.session_id, request, result, payload.quality_score)
            pair_id = pair.id
    except TrainforgeError as exc:
        _raise_http_error(exc)

    return {
        "content": result.content,
        "tokensUsed": result.tokens_used,
        "provider": result.provider.value,
        "model": result.model,
        "cost": result.cost,
        "pairId": pair_id,
    }


@router.get("/providers")
async def list_providers(service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    active = set(service.active_providers())
    return {
        "providers": [
            {
                "id": tag.value,
                "name": PROVIDER_INFO[tag]["name"],
                "docsUrl": PROVIDER_INFO[tag]["docs_url"],
                "models": provider_models(tag),
                "modelDetails": [_model_details(model) for model in provider_models(tag)],
                "hasKey": tag in active,
            }
            for tag in ProviderTag
        ]
    }


# ── Sessions ──────────────────────────────────────────────────────────

@router.post("/sessions")
async def create_session(
    payload: CreateSessionRequest,
    service: TrainerService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        session = service.create_session(payload.project_id, payload.model_id)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return session.to_dict()


@router.get("/sessions")
async def list_sessions(
    project_id: Optional[str] = Query(None, alias="projectId"),
    service: TrainerService = Depends(get_service),
) -> Dict[str, Any]:
    sessions = service.training.list_sessions(project_id)
    return {"sessions": [session.to_dict() for session in sessions], "total": len(sessions)}


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        session = service.training.get_session(session_id)
        pairs = service.training.get_pairs(session_id)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return {"session": session.to_dict(), "pairs": [pair.to_dict() for pair in pairs]}


@router.get("/sessions/{session_id}/stats")
async def session_stats(session_id: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        stats = service.get_stats(session_id)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return stats.model_dump(by_alias=True)


@router.post("/sessions/{session_id}/ready")
async def mark_ready(session_id: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        session = service.training.mark_session_ready(session_id)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return session.to_dict()


@router.post("/sessions/{session_id}/progress")
async def update_progress(
    session_id: str,
    payload: ProgressRequest,
    service: TrainerService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        session = service.training.update_progress(session_id, payload.progress)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return session.to_dict()


@router.post("/sessions/{session_id}/pairs")
async def add_pair(
    session_id: str,
    payload: PairInput,
    service: TrainerService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        pair = service.add_training_pair(session_id, payload)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return pair.to_dict()


@router.delete("/sessions/{session_id}/pairs")
async def clear_pairs(session_id: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        removed = service.training.clear_session(session_id)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return {"sessionId": session_id, "deleted": removed}


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    try:
        service.training.delete_session(session_id)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return {"sessionId": session_id, "deleted": True}


@router.get("/sessions/{session_id}/export", response_class=PlainTextResponse)
async def export_session(
    session_id: str,
    format: ExportFormat = Query(ExportFormat.GENERIC),
    min_quality: Optional[int] = Query(None, alias="minQuality", ge=1, le=5),
    service: TrainerService = Depends(get_service),
) -> PlainTextResponse:
    try:
        data = service.export_training_data(
            session_id, ExportOptions(format=format, min_quality=min_quality)
        )
    except TrainforgeError as exc:
        _raise_http_error(exc)
    filename = f"training-{session_id}.{FILE_EXTENSIONS[format]}"
    return PlainTextResponse(
        data,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── Pairs ─────────────────────────────────────────────────────────────

@router.post("/pairs/validate")
async def validate_pair(payload: PairInput, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    return service.validate_training_pair(payload).to_dict()


@router.patch("/pairs/{pair_id}")
async def rate_pair(
    pair_id: str,
    payload: RateRequest,
    service: TrainerService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        pair = service.rate(pair_id, payload.quality_score)
    except TrainforgeError as exc:
        _raise_http_error(exc)
    return pair.to_dict()


@router.delete("/pairs/{pair_id}")
async def delete_pair(pair_id: str, service: TrainerService = Depends(get_service)) -> Dict[str, Any]:
    if not service.training.delete_pair(pair_id):
        raise HTTPException(status_code=404, detail=f"Pair not found: {pair_id}")
    return {"pairId": pair_id, "deleted": True}
