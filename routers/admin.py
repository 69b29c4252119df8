from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from bank import get_fallback_questions, reload_bank
from deps.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/reload")
def reload_fallback_bank():
    n = reload_bank()
    logger.info("Fallback bank reloaded by admin (%d questions)", n)
    return {"ok": True, "count": n}


@router.get("/fallback")
def fallback_summary():
    counts: dict[str, int] = {}
    for q in get_fallback_questions():
        counts[q.category] = counts.get(q.category, 0) + 1
    return {"ok": True, "count": sum(counts.values()), "by_category": counts}
