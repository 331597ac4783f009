# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: ingest router
# -----------------------------------------------------------------------------
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_batch_loader, get_ingest_service
from api.schemas.ingest import IngestRequest, IngestResponse
from loader.VMBatchLoader import VMBatchLoader
from record.VMErrors import PipelineAborted
from record.VMRecord import RawRecord
from services.VMIngestService import VMIngestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingest", tags=["ingest"])


def _run(svc: VMIngestService, records: List[RawRecord], collection: Optional[str]) -> IngestResponse:
    try:
        report = svc.ingest(records, collection_name=collection)
    except PipelineAborted as e:
        logger.error("Ingest aborted: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    return IngestResponse(**report.to_dict())


@router.post("", response_model=IngestResponse)
def post_ingest(
    req: IngestRequest,
    svc: VMIngestService = Depends(get_ingest_service),
) -> IngestResponse:
    records = [RawRecord(id=r.id, source_text=r.source_text, metadata=r.metadata) for r in req.records]
    logger.info("POST /ingest called with %d records", len(records))
    return _run(svc, records, req.collection)


@router.post("/sample", response_model=IngestResponse)
def post_ingest_sample(
    collection: Optional[str] = Query(None, description="Target collection (defaults to configured)"),
    svc: VMIngestService = Depends(get_ingest_service),
    loader: VMBatchLoader = Depends(get_batch_loader),
) -> IngestResponse:
    records = loader.load_sample()
    logger.info("POST /ingest/sample called (%d bundled voicemails)", len(records))
    return _run(svc, records, collection)
