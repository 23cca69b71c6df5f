from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from tradejournal.storage.db import init_db, get_conn

router = APIRouter(prefix="/api/notes", tags=["notes"])

Kind = Literal["note", "action_item"]

init_db()

class NoteCreateRequest(BaseModel):
    kind: Kind = "note"
    body: str = Field(..., min_length=1, max_length=20_000)

class NoteUpdateRequest(BaseModel):
    body: Optional[str] = Field(None, min_length=1, max_length=20_000)
    done: Optional[bool] = None

class Note(BaseModel):
    id: int
    kind: Kind
    body: str
    done: bool
    created_at: str
    updated_at: str

def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _note(r) -> Note:
    return Note(
        id=int(r["id"]),
        kind=r["kind"],
        body=r["body"],
        done=bool(r["done"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )

def list_notes(kind: Optional[Kind] = None) -> List[Note]:
    with get_conn() as conn:
        if kind is None:
            rows = conn.execute("SELECT * FROM journal_notes ORDER BY id ASC").fetchall()
        else:
            rows = conn.execute("SELECT * FROM journal_notes WHERE kind=? ORDER BY id ASC", (kind,)).fetchall()
    return [_note(r) for r in rows]

def replace_notes(items: Sequence[Mapping[str, Any]], kind: Kind) -> int:
    """Swap every note of `kind` for already-validated backup items."""
    now = _utc_now_iso()
    with get_conn() as conn:
        conn.execute("DELETE FROM journal_notes WHERE kind=?", (kind,))
        for item in items:
            conn.execute(
                "INSERT INTO journal_notes (kind, body, done, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (kind, item["body"], 1 if item.get("done") else 0, item.get("created_at") or now, item.get("updated_at") or now),
            )
        conn.commit()
        return conn.execute("SELECT COUNT(*) FROM journal_notes WHERE kind=?", (kind,)).fetchone()[0]

def notes_for_backup(kind: Kind) -> List[Dict[str, Any]]:
    return [n.model_dump(exclude={"id", "kind"}) for n in list_notes(kind)]

@router.get("", response_model=List[Note])
def get_notes(kind: Optional[Kind] = None):
    return list_notes(kind)

@router.post("", response_model=Note, status_code=201)
def create_note(req: NoteCreateRequest):
    now = _utc_now_iso()
    with get_conn() as conn:
        cur = conn.execute(
            "INSERT INTO journal_notes (kind, body, done, created_at, updated_at) VALUES (?, ?, 0, ?, ?)",
            (req.kind, req.body, now, now),
        )
        conn.commit()
        new_id = int(cur.lastrowid)

    return Note(id=new_id, kind=req.kind, body=req.body, done=False, created_at=now, updated_at=now)

@router.patch("/{note_id}", response_model=Note)
def update_note(note_id: int, req: NoteUpdateRequest):
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM journal_notes WHERE id=?", (note_id,)).fetchone()
        if row is None:
            raise HTTPException(status_code=404, detail="not found")

        body = req.body if req.body is not None else row["body"]
        done = req.done if req.done is not None else bool(row["done"])
        conn.execute(
            "UPDATE journal_notes SET body=?, done=?, updated_at=? WHERE id=?",
            (body, 1 if done else 0, _utc_now_iso(), note_id),
        )
        conn.commit()
        row = conn.execute("SELECT * FROM journal_notes WHERE id=?", (note_id,)).fetchone()

    return _note(row)

@router.delete("/{note_id}")
def delete_note(note_id: int):
    with get_conn() as conn:
        cur = conn.execute("DELETE FROM journal_notes WHERE id=?", (note_id,))
        conn.commit()

    if cur.rowcount == 0:
        raise HTTPException(status_code=404, detail="not found")

    return {"deleted": True, "id": note_id}
