from fastapi import APIRouter

from tradejournal.core.config import settings
from tradejournal.services.journal import journal

router = APIRouter(tags=["health"])

@router.get("/api/health")
def health():
    return {
        "status": "degraded" if journal.degraded else "ok",
        "env": settings.app_env,
        "trades": len(journal.state.trades),
        "warning": journal.warning,
    }
