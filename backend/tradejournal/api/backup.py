import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from tradejournal.api.notes import notes_for_backup, replace_notes
from tradejournal.core.config import settings
from tradejournal.journal.backup import build_backup, parse_backup
from tradejournal.journal.errors import BackupFormatError
from tradejournal.services.journal import journal

router = APIRouter(prefix="/api/backup", tags=["backup"])

class RestoreResponse(BaseModel):
    trades: int
    notes: int
    action_items: int
    current_balance: float
    warning: Optional[str] = None

@router.get("")
def export_backup() -> Dict[str, Any]:
    return build_backup(
        journal.state,
        notes=notes_for_backup("note"),
        action_items=notes_for_backup("action_item"),
    )

@router.post("/restore", response_model=RestoreResponse)
def restore_backup(document: Dict[str, Any]):
    if len(json.dumps(document)) > settings.max_import_bytes:
        raise HTTPException(status_code=413, detail=f"backup too large (max {settings.max_import_bytes} bytes)")
    try:
        backup = parse_backup(document)
    except BackupFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # notes were validated by parse_backup along with the trades
    state = journal.restore(backup)
    n_notes = replace_notes(backup.notes, "note")
    n_items = replace_notes(backup.action_items, "action_item")

    return RestoreResponse(
        trades=len(state.trades),
        notes=n_notes,
        action_items=n_items,
        current_balance=state.portfolio.current_balance,
        warning=journal.warning,
    )
