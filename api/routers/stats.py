# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: stats router
# -----------------------------------------------------------------------------
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_cfg, get_store
from api.schemas.stats import StatsResponse
from config.Config import Config
from record.VMErrors import StoreUnavailable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
def get_stats(
    collection: Optional[str] = Query(None, description="Collection (defaults to configured)"),
    cfg: Config = Depends(get_cfg),
    store=Depends(get_store),
) -> StatsResponse:
    name = collection or cfg.collection_name
    try:
        info = store.ensure_collection(name)
    except StoreUnavailable as e:
        logger.error("Stats for '%s' failed: %s", name, e)
        raise HTTPException(status_code=503, detail=str(e))

    return StatsResponse(
        collection_name=info.name,
        total_records=info.count,
        dimension=store.dimension_of(info),
    )
