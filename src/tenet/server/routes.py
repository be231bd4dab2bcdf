"""FastAPI routes for the guidance daemon."""

from __future__ import annotations

import logging
import time

import fastapi
import pydantic

import tenet.guidelines.errors
import tenet.guidelines.index
import tenet.guidelines.query
import tenet.guidelines.render

logger = logging.getLogger("tenet.server")

router = fastapi.APIRouter()


class QueryRequest(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    file_path: str = pydantic.Field(alias="filePath")
    language: str | None = None


class ReloadRequest(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(populate_by_name=True)

    skip_invalid: bool | None = pydantic.Field(default=None, alias="skipInvalid")


def _query(request: fastapi.Request) -> tenet.guidelines.query.GuidanceQuery:
    query = getattr(request.app.state, "query", None)
    if query is None:
        raise fastapi.HTTPException(status_code=503, detail="guidelines not loaded")
    return query


# Handlers are plain ``def`` so they run in the threadpool; the index is
# immutable so concurrent requests need no locking.


@router.get("/health")
def health(request: fastapi.Request) -> dict:
    query = getattr(request.app.state, "query", None)
    return {
        "status": "ok" if query is not None else "loading",
        "documents": len(query.index) if query is not None else 0,
        "uptime": round(time.time() - request.app.state.start_time, 1),
    }


@router.post("/query")
def query_guidance(body: QueryRequest, request: fastapi.Request) -> dict:
    result = _query(request).query(body.file_path, language=body.language)
    logger.debug(
        "[query] %s -> %d document(s)", body.file_path, len(result.applied_documents)
    )
    return tenet.guidelines.render.as_dict(result)


@router.get("/documents")
def list_documents(request: fastapi.Request) -> dict:
    index = _query(request).index
    return {
        "documents": [
            {
                "id": doc.id,
                "scopePatterns": list(doc.scope_patterns),
                "precedence": tenet.guidelines.index.effective_precedence(doc),
                "explicitPrecedence": doc.precedence is not None,
                "languages": list(doc.languages),
                "sections": len(doc.body),
                "source": doc.source,
            }
            for doc in index
        ],
        "rejected": {doc_id: str(exc) for doc_id, exc in index.rejected.items()},
    }


@router.post("/reload")
def reload_guidelines(
    request: fastapi.Request, body: ReloadRequest | None = None
) -> dict:
    query = _query(request)
    skip_invalid = request.app.state.skip_invalid
    if body is not None and body.skip_invalid is not None:
        skip_invalid = body.skip_invalid
    try:
        index = query.reload_from(
            request.app.state.directories, skip_invalid=skip_invalid
        )
    except tenet.guidelines.errors.GuidelineError as exc:
        logger.warning("[reload] rejected: %s", exc)
        raise fastapi.HTTPException(status_code=422, detail=str(exc)) from exc
    logger.info("[reload] %d document(s) published", len(index))
    return {
        "status": "reloaded",
        "documents": len(index),
        "rejected": sorted(index.rejected),
    }
