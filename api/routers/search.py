# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: search router
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_query_service
from api.schemas.search import SearchHit, SearchRequest, SearchResponse
from record.VMErrors import (
    DimensionMismatch,
    EmbeddingMalformed,
    EmbeddingUnavailable,
    StoreUnavailable,
)
from services.VMQueryService import VMQueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
def post_search(
    req: SearchRequest,
    svc: VMQueryService = Depends(get_query_service),
) -> SearchResponse:
    query_text = (req.query or "").strip()
    if not query_text:
        raise HTTPException(status_code=400, detail="query must not be empty")

    try:
        matches = svc.search(query_text, top_k=req.top_k, collection_name=req.collection)
    except (EmbeddingUnavailable, StoreUnavailable) as e:
        logger.error("Search backend unavailable: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    except (EmbeddingMalformed, DimensionMismatch) as e:
        logger.error("Search got a bad vector: %s", e)
        raise HTTPException(status_code=502, detail=str(e))

    hits = [SearchHit(**h) for h in svc.to_hits(matches, include_text=req.include_text)]
    top_k = svc.default_top_k if req.top_k is None else req.top_k
    return SearchResponse(query=query_text, top_k=top_k, results=hits)
