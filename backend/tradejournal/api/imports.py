from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
import io

from tradejournal.api.trades import TradeOut
from tradejournal.core.config import settings
from tradejournal.journal.csv_io import export_trades_csv
from tradejournal.journal.filters import sort_for_display
from tradejournal.journal.metrics import calculate_metrics
from tradejournal.services.journal import journal

router = APIRouter(tags=["import-export"])

PREVIEW_ROWS = 10

class PreviewRequest(BaseModel):
    csv_text: str = Field(..., min_length=1)

class SkippedRow(BaseModel):
    line: int
    reason: str

class PreviewResponse(BaseModel):
    parsed: int
    skipped: int
    errors: List[SkippedRow]
    total_pl: float
    wins: int
    losses: int
    preview: List[TradeOut]

class CommitRequest(BaseModel):
    mode: Literal["append", "replace"] = "append"

class CommitResponse(BaseModel):
    imported: int
    total_pl: float
    current_balance: float
    warning: Optional[str] = None

@router.post("/api/import/preview", response_model=PreviewResponse)
def preview(req: PreviewRequest):
    if len(req.csv_text.encode("utf-8")) > settings.max_import_bytes:
        raise HTTPException(status_code=413, detail=f"CSV too large (max {settings.max_import_bytes} bytes)")
    try:
        result = journal.preview_import(req.csv_text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not result.trades:
        raise HTTPException(status_code=400, detail=f"No valid trades found in CSV ({result.skipped} rows skipped)")

    m = calculate_metrics(result.trades)
    return PreviewResponse(
        parsed=len(result.trades),
        skipped=result.skipped,
        errors=[SkippedRow(line=e.line, reason=e.reason) for e in result.errors],
        total_pl=m.total_pl,
        wins=m.total_wins,
        losses=m.total_losses,
        # ids are assigned on commit
        preview=[TradeOut.from_record(t.with_id(0)) for t in result.trades[:PREVIEW_ROWS]],
    )

@router.post("/api/import/commit", response_model=CommitResponse)
def commit(req: CommitRequest):
    try:
        added = journal.commit_import(req.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CommitResponse(
        imported=len(added),
        total_pl=sum(t.net_pl for t in added),
        current_balance=journal.state.portfolio.current_balance,
        warning=journal.warning,
    )

@router.get("/api/export/csv")
def export_csv():
    trades = sort_for_display(journal.state.trades)
    out = io.StringIO(export_trades_csv(trades))

    return StreamingResponse(
        out,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=trades.csv"}
    )
