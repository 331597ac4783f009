# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: stats.py
# -----------------------------------------------------------------------------
from typing import Optional

from pydantic import BaseModel


class StatsResponse(BaseModel):
    collection_name: str
    total_records: int
    dimension: Optional[int] = None
